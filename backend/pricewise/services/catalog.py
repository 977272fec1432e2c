"""
Catalog client: cached reads and invalidating writes over the remote store.

One CatalogClient is created per application session and shared by every
view. Reads go through the query cache; writes go straight to the gateway
and, only once the gateway call has succeeded, invalidate the keys listed
for that mutation in the invalidation table.
"""
import logging
from decimal import Decimal
from typing import Optional, Sequence

from pricewise.config import get_settings
from pricewise.schemas.price import PriceEntry, PriceSummary
from pricewise.schemas.product import ALL_CATEGORIES, Product
from pricewise.services.cache import QueryCache
from pricewise.services.gateway import RemoteGateway
from pricewise.services.invalidation import (
    Mutation,
    insight_key,
    keys_invalidated_by,
    keys_purged_by,
    prices_key,
    product_key,
    products_all_key,
    products_category_key,
    products_search_key,
)
from pricewise.services.price_analytics import lowest_entry, summarize

logger = logging.getLogger(__name__)


class CatalogClient:
    """Session-wide entry point for product and price reads and writes."""

    def __init__(
        self,
        gateway: RemoteGateway,
        cache: Optional[QueryCache] = None,
        price_stale_seconds: Optional[float] = None,
        insight_stale_seconds: Optional[float] = None,
    ):
        settings = get_settings()
        self.gateway = gateway
        self.cache = cache if cache is not None else QueryCache(gc_after=settings.cache_gc_seconds)
        self.price_stale_seconds = (
            price_stale_seconds if price_stale_seconds is not None
            else settings.price_stale_seconds
        )
        self.insight_stale_seconds = (
            insight_stale_seconds if insight_stale_seconds is not None
            else settings.insight_stale_seconds
        )

    def apply_mutation(self, mutation: Mutation, product_id: Optional[int] = None):
        """Invalidate (and purge) every key the mutation makes stale."""
        for key in keys_purged_by(mutation, product_id):
            self.cache.remove(key)
        self.cache.invalidate_keys(keys_invalidated_by(mutation, product_id))
        logger.debug(f"Applied invalidations for {mutation.value} (product: {product_id})")

    # ============== Product reads ==============

    async def all_products(self) -> list[Product]:
        return await self.cache.fetch(products_all_key(), self.gateway.get_all_products)

    async def search_products(self, text: str) -> list[Product]:
        """Search the catalog; blank text lists every product."""
        async def fetch():
            if not text.strip():
                return await self.gateway.get_all_products()
            return await self.gateway.search_products(text)

        return await self.cache.fetch(products_search_key(text), fetch)

    async def products_by_category(self, category: str) -> list[Product]:
        """Products in one category; "All" lists every product."""
        async def fetch():
            if category == ALL_CATEGORIES:
                return await self.gateway.get_all_products()
            return await self.gateway.get_products_by_category(category)

        return await self.cache.fetch(products_category_key(category), fetch)

    async def get_product(self, product_id: int) -> Product:
        return await self.cache.fetch(
            product_key(product_id),
            lambda: self.gateway.get_product(product_id),
        )

    # ============== Price reads ==============

    async def price_entries(self, product_id: int) -> list[PriceEntry]:
        return await self.cache.fetch(
            prices_key(product_id),
            lambda: self.gateway.get_price_entries(product_id),
            stale_after=self.price_stale_seconds,
        )

    async def ai_insight(self, product_id: int) -> str:
        return await self.cache.fetch(
            insight_key(product_id),
            lambda: self.gateway.get_ai_insight(product_id),
            stale_after=self.insight_stale_seconds,
        )

    async def lowest_price(self, product_id: int) -> Optional[PriceEntry]:
        """Cheapest entry for a product card badge."""
        return lowest_entry(await self.price_entries(product_id))

    async def price_summary(self, product_id: int) -> PriceSummary:
        return summarize(await self.price_entries(product_id))

    def refresh_insight(self, product_id: int):
        """Force the next insight read to regenerate the recommendation."""
        self.apply_mutation(Mutation.REFRESH_INSIGHT, product_id)

    # ============== Product writes ==============

    async def create_product(
        self,
        name: str,
        category: str,
        description: str = "",
        image_url: str = "",
        tags: Sequence[str] = (),
    ) -> Product:
        product = await self.gateway.create_product(name, category, description, image_url, list(tags))
        self.apply_mutation(Mutation.CREATE_PRODUCT, product.id)
        logger.info(f"Created product {product.id}: {name}")
        return product

    async def update_product(
        self,
        product_id: int,
        name: str,
        category: str,
        description: str = "",
        image_url: str = "",
        tags: Sequence[str] = (),
    ) -> Product:
        product = await self.gateway.update_product(
            product_id, name, category, description, image_url, list(tags)
        )
        self.apply_mutation(Mutation.UPDATE_PRODUCT, product_id)
        logger.info(f"Updated product {product_id}")
        return product

    async def delete_product(self, product_id: int):
        await self.gateway.delete_product(product_id)
        self.apply_mutation(Mutation.DELETE_PRODUCT, product_id)
        logger.info(f"Deleted product {product_id}")

    # ============== Price writes ==============

    async def add_price_entry(
        self, product_id: int, store: str, price: Decimal, in_stock: bool = True
    ) -> PriceEntry:
        entry = await self.gateway.add_price_entry(product_id, store, price, in_stock)
        self.apply_mutation(Mutation.ADD_PRICE, product_id)
        logger.info(f"Added {store} price for product {product_id}: {price}")
        return entry

    async def update_price_entry(
        self, product_id: int, store: str, price: Decimal, in_stock: bool = True
    ) -> PriceEntry:
        entry = await self.gateway.update_price_entry(product_id, store, price, in_stock)
        self.apply_mutation(Mutation.UPDATE_PRICE, product_id)
        logger.info(f"Updated {store} price for product {product_id}: {price}")
        return entry

    async def delete_price_entry(self, product_id: int, store: str):
        await self.gateway.delete_price_entry(product_id, store)
        self.apply_mutation(Mutation.DELETE_PRICE, product_id)
        logger.info(f"Deleted {store} price for product {product_id}")


def filter_products(products: Sequence[Product], search_text: str = "", category: str = ALL_CATEGORIES) -> list[Product]:
    """
    Instant client-side filter over an already fetched product list.

    Search is a case-insensitive substring match on name, description,
    category or any tag. The category filter is exact unless it is "All".
    """
    result = list(products)

    query = search_text.strip().lower()
    if query:
        result = [
            p for p in result
            if query in p.name.lower()
            or query in p.description.lower()
            or query in p.category.lower()
            or any(query in tag.lower() for tag in p.tags)
        ]

    if category != ALL_CATEGORIES:
        result = [p for p in result if p.category == category]

    return result
