"""Network identifier domain model."""

from enum import Enum


class NetworkId(Enum):
    """Transport networks a provider can be created for."""

    DB = "db"  # Deutsche Bahn
    VBB = "vbb"  # Berlin/Brandenburg
    MVG = "mvg"  # Munich
    KVB = "kvb"  # Cologne
    NVV = "nvv"  # North Hesse
    VVV = "vvv"  # Vorarlberg
    VSN = "vsn"  # South Lower Saxony
    RKRP = "rkrp"  # Rhineland-Palatinate / Saarland
    NASA = "nasa"  # Saxony-Anhalt

    @classmethod
    def parse(cls, value: "str | NetworkId") -> "NetworkId":
        """Parse a network id case-insensitively."""
        if isinstance(value, NetworkId):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            known = ", ".join(n.value for n in cls)
            raise ValueError(f"Unknown network '{value}'. Known networks: {known}") from None
