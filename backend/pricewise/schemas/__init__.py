from pricewise.schemas.product import (
    ALL_CATEGORIES,
    CATEGORIES,
    Product,
    ProductCreate,
    ProductUpdate,
)
from pricewise.schemas.price import (
    InsightResponse,
    PriceEntry,
    PriceEntryCreate,
    PriceEntryUpdate,
    PriceSummary,
)

__all__ = [
    "ALL_CATEGORIES", "CATEGORIES",
    "Product", "ProductCreate", "ProductUpdate",
    "PriceEntry", "PriceEntryCreate", "PriceEntryUpdate", "PriceSummary",
    "InsightResponse",
]
