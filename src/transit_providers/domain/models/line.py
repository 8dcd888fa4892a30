"""Line domain model."""

from dataclasses import dataclass

from transit_providers.domain.models.product import Product


@dataclass(frozen=True, eq=False)
class Line:
    """A public transport line, e.g. ``U3`` or ``ICE 599``.

    Lines compare equal on network, product and label; ids and display names
    vary between backends for the same line.
    """

    id: str | None
    network: str | None = None
    product: Product | None = None
    label: str | None = None
    name: str | None = None
    message: str | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Line):
            return NotImplemented
        return (self.network, self.product, self.label) == (
            other.network,
            other.product,
            other.label,
        )

    def __hash__(self) -> int:
        return hash((self.network, self.product, self.label))

    @property
    def product_code(self) -> str | None:
        return self.product.code if self.product else None
