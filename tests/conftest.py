"""Shared fixtures: an in-memory remote store and a controllable clock."""
import asyncio
from collections import Counter
from decimal import Decimal

import pytest

from pricewise.config import get_settings
from pricewise.exceptions import ConflictError, NotFoundError, TransportError
from pricewise.schemas.price import PriceEntry
from pricewise.schemas.product import Product
from pricewise.services.cache import QueryCache
from pricewise.services.catalog import CatalogClient


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeGateway:
    """
    In-memory remote store.

    Counts calls per operation, can fail the Nth call of an operation, and
    can hold an operation on an asyncio.Event gate. Reads snapshot their
    result before waiting on the gate, so a gated read returns the data as
    it was when the call was issued.
    """

    def __init__(self):
        self.products: dict[int, Product] = {}
        self.prices: dict[int, dict[str, PriceEntry]] = {}
        self.next_id = 1
        self.calls = Counter()
        self.failures: dict[str, int] = {}
        self.gates: dict[str, asyncio.Event] = {}

    def fail_on(self, op: str, call_number: int = 1):
        self.failures[op] = call_number

    async def _enter(self, op: str):
        self.calls[op] += 1
        call_number = self.calls[op]
        gate = self.gates.get(op)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if self.failures.get(op) == call_number:
            raise TransportError(f"{op} call {call_number} failed")

    def _require_product(self, id: int):
        if id not in self.products:
            raise NotFoundError(f"product {id} not found", status_code=404)

    # Products

    async def create_product(self, name, category, description, image_url, tags):
        await self._enter("create_product")
        product = Product(
            id=self.next_id, name=name, category=category,
            description=description, image_url=image_url, tags=list(tags),
        )
        self.next_id += 1
        self.products[product.id] = product
        self.prices[product.id] = {}
        return product

    async def update_product(self, id, name, category, description, image_url, tags):
        await self._enter("update_product")
        self._require_product(id)
        product = Product(
            id=id, name=name, category=category,
            description=description, image_url=image_url, tags=list(tags),
        )
        self.products[id] = product
        return product

    async def delete_product(self, id):
        await self._enter("delete_product")
        self._require_product(id)
        del self.products[id]
        del self.prices[id]

    async def get_product(self, id):
        product = self.products.get(id)
        await self._enter("get_product")
        if product is None:
            raise NotFoundError(f"product {id} not found", status_code=404)
        return product

    async def get_all_products(self):
        result = list(self.products.values())
        await self._enter("get_all_products")
        return result

    async def get_products_by_category(self, category):
        result = [p for p in self.products.values() if p.category == category]
        await self._enter("get_products_by_category")
        return result

    async def search_products(self, text):
        q = text.lower()
        result = [
            p for p in self.products.values()
            if q in p.name.lower() or q in p.description.lower()
            or q in p.category.lower() or any(q in t.lower() for t in p.tags)
        ]
        await self._enter("search_products")
        return result

    # Price entries

    async def add_price_entry(self, product_id, store, price, in_stock):
        await self._enter("add_price_entry")
        self._require_product(product_id)
        if store in self.prices[product_id]:
            raise ConflictError(f"{store} price exists for {product_id}", status_code=409)
        entry = PriceEntry(product_id=product_id, store=store, price=Decimal(str(price)), in_stock=in_stock)
        self.prices[product_id][store] = entry
        return entry

    async def update_price_entry(self, product_id, store, price, in_stock):
        await self._enter("update_price_entry")
        if store not in self.prices.get(product_id, {}):
            raise NotFoundError(f"no {store} price for {product_id}", status_code=404)
        entry = PriceEntry(product_id=product_id, store=store, price=Decimal(str(price)), in_stock=in_stock)
        self.prices[product_id][store] = entry
        return entry

    async def delete_price_entry(self, product_id, store):
        await self._enter("delete_price_entry")
        if store not in self.prices.get(product_id, {}):
            raise NotFoundError(f"no {store} price for {product_id}", status_code=404)
        del self.prices[product_id][store]

    async def get_price_entries(self, product_id):
        result = list(self.prices.get(product_id, {}).values())
        await self._enter("get_price_entries")
        return result

    async def get_ai_insight(self, product_id):
        entries = list(self.prices.get(product_id, {}).values())
        await self._enter("get_ai_insight")
        if not entries:
            return ""
        best = min(entries, key=lambda e: e.price)
        return f"Buy at {best.store} for ${best.price} ({len(entries)} stores compared)"


async def settle(rounds: int = 10):
    """Let scheduled tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog(gateway, clock):
    return CatalogClient(
        gateway,
        cache=QueryCache(clock=clock),
        price_stale_seconds=30,
        insight_stale_seconds=30,
    )


@pytest.fixture
def admin_key(monkeypatch):
    monkeypatch.setenv("ADMIN_API_KEY", "test-admin-key")
    get_settings.cache_clear()
    yield "test-admin-key"
    get_settings.cache_clear()
