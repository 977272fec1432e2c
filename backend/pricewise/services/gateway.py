"""
Remote product store gateway.

`RemoteGateway` is the call surface the catalog depends on. `HttpGateway`
talks to the store's REST API over httpx. Calls are never retried here;
retry policy belongs to the caller.
"""
import logging
from decimal import Decimal
from typing import Optional, Protocol, Sequence
from urllib.parse import quote

import httpx

from pricewise.config import get_settings
from pricewise.exceptions import (
    ConflictError,
    GatewayError,
    NotFoundError,
    TransportError,
)
from pricewise.schemas.price import PriceEntry
from pricewise.schemas.product import Product

logger = logging.getLogger(__name__)


class RemoteGateway(Protocol):
    """Asynchronous CRUD surface of the remote product store."""

    async def create_product(
        self, name: str, category: str, description: str, image_url: str, tags: Sequence[str]
    ) -> Product: ...

    async def update_product(
        self, id: int, name: str, category: str, description: str, image_url: str, tags: Sequence[str]
    ) -> Product: ...

    async def delete_product(self, id: int) -> None: ...

    async def get_product(self, id: int) -> Product: ...

    async def get_all_products(self) -> list[Product]: ...

    async def get_products_by_category(self, category: str) -> list[Product]: ...

    async def search_products(self, text: str) -> list[Product]: ...

    async def add_price_entry(
        self, product_id: int, store: str, price: Decimal, in_stock: bool
    ) -> PriceEntry: ...

    async def update_price_entry(
        self, product_id: int, store: str, price: Decimal, in_stock: bool
    ) -> PriceEntry: ...

    async def delete_price_entry(self, product_id: int, store: str) -> None: ...

    async def get_price_entries(self, product_id: int) -> list[PriceEntry]: ...

    async def get_ai_insight(self, product_id: int) -> str: ...


class HttpGateway:
    """RemoteGateway over the store's REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.client = httpx.AsyncClient(
            base_url=base_url or settings.remote_api_url,
            timeout=timeout if timeout is not None else settings.remote_timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "HttpGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self):
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Send one request and map failures onto the gateway error taxonomy."""
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Remote call {method} {path} failed: {e}")
            raise TransportError(f"{method} {path}: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"{method} {path}: not found", status_code=404)
        if response.status_code == 409:
            raise ConflictError(f"{method} {path}: already exists", status_code=409)
        if response.is_error:
            logger.warning(f"Remote call {method} {path} returned {response.status_code}")
            raise TransportError(
                f"{method} {path}: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    async def _json(self, method: str, path: str, **kwargs):
        response = await self._request(method, path, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"{method} {path}: invalid JSON body") from e

    @staticmethod
    def _product_body(name, category, description, image_url, tags) -> dict:
        return {
            "name": name,
            "category": category,
            "description": description,
            "imageUrl": image_url,
            "tags": list(tags),
        }

    @staticmethod
    def _expect_list(data) -> list:
        if not isinstance(data, list):
            raise GatewayError(f"Malformed response: expected a list, got {type(data).__name__}")
        return data

    @staticmethod
    def _parse_product(data) -> Product:
        try:
            return Product.model_validate(data)
        except ValueError as e:
            raise GatewayError(f"Malformed product in response: {e}") from e

    @staticmethod
    def _parse_price(data) -> PriceEntry:
        try:
            return PriceEntry.model_validate(data)
        except ValueError as e:
            raise GatewayError(f"Malformed price entry in response: {e}") from e

    # Products

    async def create_product(self, name, category, description, image_url, tags) -> Product:
        data = await self._json(
            "POST", "/products",
            json=self._product_body(name, category, description, image_url, tags),
        )
        return self._parse_product(data)

    async def update_product(self, id, name, category, description, image_url, tags) -> Product:
        data = await self._json(
            "PUT", f"/products/{id}",
            json=self._product_body(name, category, description, image_url, tags),
        )
        return self._parse_product(data)

    async def delete_product(self, id: int) -> None:
        await self._request("DELETE", f"/products/{id}")

    async def get_product(self, id: int) -> Product:
        return self._parse_product(await self._json("GET", f"/products/{id}"))

    async def get_all_products(self) -> list[Product]:
        data = await self._json("GET", "/products")
        return [self._parse_product(item) for item in self._expect_list(data)]

    async def get_products_by_category(self, category: str) -> list[Product]:
        data = await self._json("GET", f"/products/category/{quote(category, safe='')}")
        return [self._parse_product(item) for item in self._expect_list(data)]

    async def search_products(self, text: str) -> list[Product]:
        data = await self._json("GET", "/products/search", params={"q": text})
        return [self._parse_product(item) for item in self._expect_list(data)]

    # Price entries

    async def add_price_entry(self, product_id, store, price, in_stock) -> PriceEntry:
        data = await self._json(
            "POST", f"/products/{product_id}/prices",
            json={"store": store, "price": float(price), "inStock": in_stock},
        )
        return self._parse_price(data)

    async def update_price_entry(self, product_id, store, price, in_stock) -> PriceEntry:
        data = await self._json(
            "PUT", f"/products/{product_id}/prices/{quote(store, safe='')}",
            json={"price": float(price), "inStock": in_stock},
        )
        return self._parse_price(data)

    async def delete_price_entry(self, product_id: int, store: str) -> None:
        await self._request("DELETE", f"/products/{product_id}/prices/{quote(store, safe='')}")

    async def get_price_entries(self, product_id: int) -> list[PriceEntry]:
        data = await self._json("GET", f"/products/{product_id}/prices")
        return [self._parse_price(item) for item in self._expect_list(data)]

    async def get_ai_insight(self, product_id: int) -> str:
        data = await self._json("GET", f"/products/{product_id}/insight")
        if data is None:
            return ""
        if not isinstance(data, dict):
            raise GatewayError(f"Malformed insight response: expected an object, got {type(data).__name__}")
        insight = data.get("insight") or ""
        if not isinstance(insight, str):
            raise GatewayError(f"Malformed insight response: expected text, got {type(insight).__name__}")
        return insight
