"""Position (platform/track) domain model."""

import re
from dataclasses import dataclass

_NAME_SECTION = re.compile(r"(\d{1,5})\s*([A-Z](?:\s*-?\s*[A-Z])?)?", re.IGNORECASE)
_NAME_CARDINAL = re.compile(r"(\d{1,5})\s*(Nord|Süd|Ost|West)", re.IGNORECASE)


@dataclass(frozen=True)
class Position:
    """Platform or track of a stop, optionally with a section (e.g. ``12`` ``A-C``)."""

    name: str
    section: str | None = None

    def __str__(self) -> str:
        return f"{self.name} {self.section}" if self.section else self.name

    @classmethod
    def parse(cls, position: str | None) -> "Position | None":
        """Parse a backend platform string, normalizing leading zeros and sections."""
        if position is None or not position.strip():
            return None
        position = position.strip()

        match = _NAME_SECTION.fullmatch(position)
        if match:
            name = str(int(match.group(1)))
            section = match.group(2)
            return cls(name, re.sub(r"\s+", "", section) if section else None)

        match = _NAME_CARDINAL.fullmatch(position)
        if match:
            return cls(str(int(match.group(1))), match.group(2)[0].upper())

        return cls(position)
