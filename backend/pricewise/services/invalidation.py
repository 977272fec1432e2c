"""
Query keys and the mutation -> invalidated-keys table.

Every cached read lives under one of the keys below. After a write
succeeds, the catalog invalidates exactly the keys this table lists for
that mutation; nothing is invalidated implicitly.
"""
from enum import Enum
from typing import Optional

# Cache key prefixes
PREFIX_PRODUCTS = "products:"
PREFIX_PRODUCT = "product:"
PREFIX_PRICES = "prices:"
PREFIX_INSIGHT = "insight:"

PRODUCTS_ALL = f"{PREFIX_PRODUCTS}all"

# Search and category lists are views over the full product list
PRODUCT_LIST_FAMILY = (
    PRODUCTS_ALL,
    f"{PREFIX_PRODUCTS}search:*",
    f"{PREFIX_PRODUCTS}category:*",
)


def products_all_key() -> str:
    return PRODUCTS_ALL


def products_search_key(text: str) -> str:
    return f"{PREFIX_PRODUCTS}search:{text}"


def products_category_key(category: str) -> str:
    return f"{PREFIX_PRODUCTS}category:{category}"


def product_key(product_id: int) -> str:
    return f"{PREFIX_PRODUCT}{product_id}"


def prices_key(product_id: int) -> str:
    return f"{PREFIX_PRICES}{product_id}"


def insight_key(product_id: int) -> str:
    return f"{PREFIX_INSIGHT}{product_id}"


class Mutation(str, Enum):
    CREATE_PRODUCT = "create_product"
    UPDATE_PRODUCT = "update_product"
    DELETE_PRODUCT = "delete_product"
    ADD_PRICE = "add_price_entry"
    UPDATE_PRICE = "update_price_entry"
    DELETE_PRICE = "delete_price_entry"
    SEED = "seed_sample_data"
    REFRESH_INSIGHT = "refresh_insight"


# Per-product keys each mutation invalidates; the list family is separate
_PRODUCT_SCOPED = {
    Mutation.CREATE_PRODUCT: (),
    Mutation.UPDATE_PRODUCT: (product_key,),
    Mutation.DELETE_PRODUCT: (),
    Mutation.ADD_PRICE: (prices_key, insight_key),
    Mutation.UPDATE_PRICE: (prices_key, insight_key),
    Mutation.DELETE_PRICE: (prices_key, insight_key),
    Mutation.SEED: (),
    Mutation.REFRESH_INSIGHT: (insight_key,),
}

# Mutations whose effect shows up in product lists (cards show the lowest price)
_TOUCHES_LIST = {
    Mutation.CREATE_PRODUCT,
    Mutation.UPDATE_PRODUCT,
    Mutation.DELETE_PRODUCT,
    Mutation.ADD_PRICE,
    Mutation.DELETE_PRICE,
    Mutation.SEED,
}

# Keys dropped outright, so a re-issued id never sees the deleted product's data
_PURGED = {
    Mutation.DELETE_PRODUCT: (product_key, prices_key, insight_key),
}


def keys_invalidated_by(mutation: Mutation, product_id: Optional[int] = None) -> list[str]:
    """
    Keys (or glob patterns) to invalidate after `mutation` succeeds.

    Raises ValueError when the mutation is product-scoped and no
    product_id is given.
    """
    scoped = _PRODUCT_SCOPED[mutation]
    if scoped and product_id is None:
        raise ValueError(f"{mutation.value} requires a product_id")

    keys: list[str] = []
    if mutation in _TOUCHES_LIST:
        keys.extend(PRODUCT_LIST_FAMILY)
    keys.extend(make_key(product_id) for make_key in scoped)
    return keys


def keys_purged_by(mutation: Mutation, product_id: Optional[int] = None) -> list[str]:
    """Keys whose cached values must be removed, not just marked stale."""
    purged = _PURGED.get(mutation, ())
    if purged and product_id is None:
        raise ValueError(f"{mutation.value} requires a product_id")
    return [make_key(product_id) for make_key in purged]
