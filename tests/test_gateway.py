import asyncio
import json
from decimal import Decimal

import httpx
import pytest

from pricewise.exceptions import ConflictError, GatewayError, NotFoundError, TransportError
from pricewise.services.gateway import HttpGateway

PRODUCT = {
    "id": 12,
    "name": "Kindle",
    "category": "Electronics",
    "description": "E-reader",
    "imageUrl": "https://img/kindle.jpg",
    "tags": ["books", "e-reader"],
}


def _run(handler, call):
    """Run `call(gateway)` against an HttpGateway backed by `handler`."""
    async def scenario():
        async with HttpGateway(base_url="http://store.test", transport=httpx.MockTransport(handler)) as gateway:
            return await call(gateway)

    return asyncio.run(scenario())


def test_create_product_sends_camel_case_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=PRODUCT)

    product = _run(handler, lambda g: g.create_product(
        "Kindle", "Electronics", "E-reader", "https://img/kindle.jpg", ("books", "e-reader")
    ))

    assert seen["method"] == "POST"
    assert seen["path"] == "/products"
    assert seen["body"]["imageUrl"] == "https://img/kindle.jpg"
    assert seen["body"]["tags"] == ["books", "e-reader"]
    assert product.id == 12
    assert product.image_url == "https://img/kindle.jpg"


def test_list_and_search_products():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/products/search":
            assert request.url.params["q"] == "kind"
        return httpx.Response(200, json=[PRODUCT])

    found = _run(handler, lambda g: g.search_products("kind"))
    listing = _run(handler, lambda g: g.get_all_products())

    assert [p.id for p in found] == [12]
    assert [p.name for p in listing] == ["Kindle"]


def test_price_entry_calls():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.raw_path.decode()))
        if request.method == "GET":
            return httpx.Response(200, json=[{"productId": 12, "store": "Best Buy", "price": 159.99, "inStock": True}])
        if request.method == "DELETE":
            return httpx.Response(204)
        body = json.loads(request.content)
        return httpx.Response(200, json={"productId": 12, "store": "Best Buy", **body})

    async def calls(gateway):
        added = await gateway.add_price_entry(12, "Best Buy", Decimal("149.99"), True)
        updated = await gateway.update_price_entry(12, "Best Buy", Decimal("139.99"), False)
        entries = await gateway.get_price_entries(12)
        await gateway.delete_price_entry(12, "Best Buy")
        return added, updated, entries

    added, updated, entries = _run(handler, calls)

    assert added.price == Decimal("149.99")
    assert updated.in_stock is False
    assert entries[0].price == Decimal("159.99")
    assert seen == [
        ("POST", "/products/12/prices"),
        ("PUT", "/products/12/prices/Best%20Buy"),
        ("GET", "/products/12/prices"),
        ("DELETE", "/products/12/prices/Best%20Buy"),
    ]


def test_insight_body():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/products/12/insight"
        return httpx.Response(200, json={"insight": "Buy at Amazon"})

    assert _run(handler, lambda g: g.get_ai_insight(12)) == "Buy at Amazon"


def test_missing_insight_is_empty():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"insight": None})

    assert _run(handler, lambda g: g.get_ai_insight(12)) == ""


@pytest.mark.parametrize(
    "status, error",
    [(404, NotFoundError), (409, ConflictError), (500, TransportError), (503, TransportError)],
)
def test_status_codes_map_to_errors(status, error):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"detail": "nope"})

    with pytest.raises(error) as excinfo:
        _run(handler, lambda g: g.get_product(1))

    assert excinfo.value.status_code == status


def test_network_failure_is_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError):
        _run(handler, lambda g: g.get_all_products())


def test_malformed_payload_is_gateway_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": -5, "name": "Broken"})

    with pytest.raises(GatewayError):
        _run(handler, lambda g: g.get_product(5))


@pytest.mark.parametrize(
    "body, call",
    [
        (None, lambda g: g.get_all_products()),
        ({"items": []}, lambda g: g.search_products("tv")),
        ("oops", lambda g: g.get_products_by_category("Home")),
        (None, lambda g: g.get_price_entries(3)),
        ("not an object", lambda g: g.get_ai_insight(3)),
        ({"insight": ["a", "b"]}, lambda g: g.get_ai_insight(3)),
    ],
)
def test_unexpected_body_shape_is_gateway_error(body, call):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    with pytest.raises(GatewayError):
        _run(handler, call)
