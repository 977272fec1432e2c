"""Admin API endpoints for seeding and cache maintenance."""
from fastapi import APIRouter, Depends, Header, HTTPException
from pricewise.config import get_settings
from pricewise.exceptions import SeedError
from pricewise.seed import seed_sample_data
from pricewise.services.catalog import CatalogClient
from pricewise.session import get_catalog

router = APIRouter(prefix="/admin", tags=["admin"])


def verify_admin_key(x_admin_key: str = Header(..., description="Admin API key")):
    admin_key = get_settings().admin_api_key
    if not admin_key or x_admin_key != admin_key:
        raise HTTPException(status_code=403, detail="Invalid admin key")


@router.post("/seed", dependencies=[Depends(verify_admin_key)])
async def seed(catalog: CatalogClient = Depends(get_catalog)):
    """Load the 25-product sample catalog into the remote store."""
    try:
        result = await seed_sample_data(catalog)
    except SeedError as e:
        # Partial seeding is kept; report how far it got
        raise HTTPException(
            status_code=502,
            detail={
                "error": str(e),
                "failed_sample": e.sample_name,
                "products_created": e.products_created,
                "prices_added": e.prices_added,
            },
        )

    return {
        "status": "success",
        "products_created": result.products_created,
        "prices_added": result.prices_added,
        "product_ids": result.product_ids,
    }


@router.get("/cache/stats", dependencies=[Depends(verify_admin_key)])
def cache_stats(catalog: CatalogClient = Depends(get_catalog)):
    """Query cache counters and keys."""
    return {**catalog.cache.stats(), "keys": catalog.cache.keys()}


@router.delete("/cache", dependencies=[Depends(verify_admin_key)])
def clear_cache(catalog: CatalogClient = Depends(get_catalog)):
    """Drop every cached query result."""
    catalog.cache.clear()
    return {"status": "success"}
