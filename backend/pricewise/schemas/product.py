from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

# Display categories offered by the product form; the core does not enforce them
CATEGORIES = [
    "Electronics", "Food", "Clothing", "Home", "Sports",
    "Beauty", "Books", "Toys", "Automotive", "Other",
]
ALL_CATEGORIES = "All"  # Filter sentinel meaning "no category filter"

MAX_PRODUCT_ID = 2**64 - 1


class ProductBase(BaseModel):
    name: str
    category: str
    description: str = ""
    image_url: str = ""
    tags: list[str] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ProductCreate(ProductBase):
    pass


class ProductUpdate(ProductBase):
    """Full replacement of every editable product field."""
    pass


class Product(ProductBase):
    """A catalog product. Identity is the store-assigned id."""
    id: int = Field(ge=0, le=MAX_PRODUCT_ID)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    @property
    def identity(self) -> int:
        return self.id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Product):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)
