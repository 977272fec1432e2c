from pydantic import BaseModel, Field, computed_field
from decimal import Decimal
from pydantic.alias_generators import to_camel


class PriceEntryUpdate(BaseModel):
    """Editable fields of a price entry. The store name is fixed at creation."""
    price: Decimal = Field(ge=0)
    in_stock: bool = True

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PriceEntryCreate(PriceEntryUpdate):
    store: str = Field(min_length=1)


class PriceEntry(BaseModel):
    """One store's price for one product, keyed by (product_id, store)."""
    product_id: int = Field(ge=0)
    store: str
    price: Decimal = Field(ge=0)
    in_stock: bool = True

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    @property
    def identity(self) -> tuple[int, str]:
        return (self.product_id, self.store)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PriceEntry):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)


class PriceSummary(BaseModel):
    """Derived best-price comparison for one product. Never stored."""
    entries: list[PriceEntry]  # Sorted by price ascending
    lowest: PriceEntry | None = None
    highest: PriceEntry | None = None
    savings: Decimal | None = None  # highest - lowest, absolute
    store_count: int = 0
    in_stock_count: int = 0

    @computed_field
    @property
    def has_comparison(self) -> bool:
        """Best/highest/savings stats are only meaningful with two or more stores."""
        return self.store_count >= 2


class InsightResponse(BaseModel):
    product_id: int
    insight: str
