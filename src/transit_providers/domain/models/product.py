"""Product (means of transport) domain model."""

from enum import Enum


class Product(Enum):
    """Public transport product, identified by a single-character code."""

    HIGH_SPEED_TRAIN = "I"
    REGIONAL_TRAIN = "R"
    SUBURBAN_TRAIN = "S"
    SUBWAY = "U"
    TRAM = "T"
    BUS = "B"
    FERRY = "F"
    CABLECAR = "C"
    ON_DEMAND = "P"

    @property
    def code(self) -> str:
        return self.value

    @classmethod
    def from_code(cls, code: str) -> "Product":
        """Look up a product by its code."""
        try:
            return cls(code)
        except ValueError:
            raise ValueError(f"Unknown product code: {code!r}") from None

    @classmethod
    def from_codes(cls, codes: str) -> frozenset["Product"]:
        """Look up a set of products from a string of codes, e.g. ``"SUT"``."""
        return frozenset(cls.from_code(c) for c in codes)


ALL_PRODUCTS: frozenset[Product] = frozenset(Product)
ALL_EXCEPT_HIGHSPEED: frozenset[Product] = ALL_PRODUCTS - {Product.HIGH_SPEED_TRAIN}
