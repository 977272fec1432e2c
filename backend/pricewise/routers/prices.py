from fastapi import APIRouter, Depends
from pricewise.exceptions import GatewayError
from pricewise.schemas.price import PriceEntry, PriceEntryCreate, PriceEntryUpdate
from pricewise.services.catalog import CatalogClient
from pricewise.session import get_catalog, http_error

router = APIRouter(prefix="/products/{product_id}/prices", tags=["prices"])


@router.get("/", response_model=list[PriceEntry])
async def list_prices(product_id: int, catalog: CatalogClient = Depends(get_catalog)):
    """All store prices for a product."""
    try:
        return await catalog.price_entries(product_id)
    except GatewayError as e:
        raise http_error(e)


@router.post("/", response_model=PriceEntry, status_code=201)
async def add_price(
    product_id: int,
    entry: PriceEntryCreate,
    catalog: CatalogClient = Depends(get_catalog)
):
    """Add a store price. Fails with 409 if that store already has one."""
    try:
        return await catalog.add_price_entry(product_id, entry.store, entry.price, entry.in_stock)
    except GatewayError as e:
        raise http_error(e)


@router.put("/{store}", response_model=PriceEntry)
async def update_price(
    product_id: int,
    store: str,
    entry: PriceEntryUpdate,
    catalog: CatalogClient = Depends(get_catalog)
):
    """Update price and stock status. The store itself cannot change."""
    try:
        return await catalog.update_price_entry(product_id, store, entry.price, entry.in_stock)
    except GatewayError as e:
        raise http_error(e)


@router.delete("/{store}", status_code=204)
async def delete_price(product_id: int, store: str, catalog: CatalogClient = Depends(get_catalog)):
    """Remove one store's price."""
    try:
        await catalog.delete_price_entry(product_id, store)
    except GatewayError as e:
        raise http_error(e)
