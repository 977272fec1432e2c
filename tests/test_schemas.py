from decimal import Decimal

import pytest
from pydantic import ValidationError

from pricewise.schemas.price import PriceEntry, PriceEntryCreate
from pricewise.schemas.product import MAX_PRODUCT_ID, Product


def test_product_equality_is_by_id():
    a = Product(id=7, name="Mouse", category="Electronics")
    b = Product(id=7, name="Renamed mouse", category="Other", tags=["x"])
    c = Product(id=8, name="Mouse", category="Electronics")

    assert a == b
    assert a != c
    assert len({a, b, c}) == 2


def test_price_entry_equality_is_by_product_and_store():
    a = PriceEntry(product_id=1, store="Amazon", price=Decimal("10"), in_stock=True)
    b = PriceEntry(product_id=1, store="Amazon", price=Decimal("12"), in_stock=False)
    c = PriceEntry(product_id=2, store="Amazon", price=Decimal("10"), in_stock=True)

    assert a == b
    assert a != c
    assert a.identity == (1, "Amazon")


def test_entities_are_immutable():
    product = Product(id=1, name="Mouse", category="Electronics")

    with pytest.raises(ValidationError):
        product.name = "Keyboard"


def test_wire_aliases_are_camel_case():
    entry = PriceEntry.model_validate({"productId": 3, "store": "Target", "price": 19.99, "inStock": False})
    product = Product.model_validate({"id": 3, "name": "Lamp", "category": "Home", "imageUrl": "http://img"})

    assert entry.product_id == 3
    assert entry.price == Decimal("19.99")
    assert entry.in_stock is False
    assert product.image_url == "http://img"
    assert product.model_dump(by_alias=True)["imageUrl"] == "http://img"


def test_product_id_is_unsigned_64_bit():
    Product(id=MAX_PRODUCT_ID, name="Big", category="Other")

    with pytest.raises(ValidationError):
        Product(id=-1, name="Negative", category="Other")
    with pytest.raises(ValidationError):
        Product(id=MAX_PRODUCT_ID + 1, name="Overflow", category="Other")


def test_price_must_not_be_negative():
    with pytest.raises(ValidationError):
        PriceEntryCreate(store="Amazon", price=Decimal("-1"))
