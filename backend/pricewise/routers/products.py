from fastapi import APIRouter, Depends, HTTPException, Query
from pricewise.exceptions import GatewayError
from pricewise.schemas.price import InsightResponse, PriceEntry, PriceSummary
from pricewise.schemas.product import ALL_CATEGORIES, CATEGORIES, Product, ProductCreate, ProductUpdate
from pricewise.services.catalog import CatalogClient, filter_products
from pricewise.session import get_catalog, http_error

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=list[Product])
async def list_products(
    search: str = "",
    category: str = ALL_CATEGORIES,
    catalog: CatalogClient = Depends(get_catalog)
):
    """List all products, optionally filtered by search text and category."""
    try:
        products = await catalog.all_products()
    except GatewayError as e:
        raise http_error(e)
    return filter_products(products, search, category)


@router.get("/categories", response_model=list[str])
def list_categories():
    """Display categories, with the "All" filter first."""
    return [ALL_CATEGORIES, *CATEGORIES]


@router.get("/search", response_model=list[Product])
async def search_products(
    q: str = Query("", description="Matches name, description, category or tags"),
    catalog: CatalogClient = Depends(get_catalog)
):
    """Search products in the remote store."""
    try:
        return await catalog.search_products(q)
    except GatewayError as e:
        raise http_error(e)


@router.get("/category/{category}", response_model=list[Product])
async def products_by_category(category: str, catalog: CatalogClient = Depends(get_catalog)):
    """Products in one category ("All" lists every product)."""
    try:
        return await catalog.products_by_category(category)
    except GatewayError as e:
        raise http_error(e)


@router.post("/", response_model=Product, status_code=201)
async def create_product(product: ProductCreate, catalog: CatalogClient = Depends(get_catalog)):
    """Create a product; the remote store assigns its id."""
    if not product.name.strip():
        raise HTTPException(status_code=400, detail="Product name is required")
    try:
        return await catalog.create_product(
            product.name, product.category, product.description, product.image_url, product.tags
        )
    except GatewayError as e:
        raise http_error(e)


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: int, catalog: CatalogClient = Depends(get_catalog)):
    """Get a single product."""
    try:
        return await catalog.get_product(product_id)
    except GatewayError as e:
        raise http_error(e)


@router.put("/{product_id}", response_model=Product)
async def update_product(
    product_id: int,
    product: ProductUpdate,
    catalog: CatalogClient = Depends(get_catalog)
):
    """Replace every editable field of a product."""
    try:
        return await catalog.update_product(
            product_id, product.name, product.category,
            product.description, product.image_url, product.tags,
        )
    except GatewayError as e:
        raise http_error(e)


@router.delete("/{product_id}", status_code=204)
async def delete_product(product_id: int, catalog: CatalogClient = Depends(get_catalog)):
    """Delete a product and, in the remote store, all its prices."""
    try:
        await catalog.delete_product(product_id)
    except GatewayError as e:
        raise http_error(e)


@router.get("/{product_id}/lowest-price", response_model=PriceEntry | None)
async def lowest_price(product_id: int, catalog: CatalogClient = Depends(get_catalog)):
    """Cheapest store price for a product card, or null without prices."""
    try:
        return await catalog.lowest_price(product_id)
    except GatewayError as e:
        raise http_error(e)


@router.get("/{product_id}/summary", response_model=PriceSummary)
async def price_summary(product_id: int, catalog: CatalogClient = Depends(get_catalog)):
    """
    Price comparison for the product detail view.

    Entries are sorted cheapest first; savings is the absolute gap
    between the highest and lowest store price.
    """
    try:
        return await catalog.price_summary(product_id)
    except GatewayError as e:
        raise http_error(e)


@router.get("/{product_id}/insight", response_model=InsightResponse)
async def get_insight(product_id: int, catalog: CatalogClient = Depends(get_catalog)):
    """AI buying recommendation; empty when the product has no prices."""
    try:
        insight = await catalog.ai_insight(product_id)
    except GatewayError as e:
        raise http_error(e)
    return InsightResponse(product_id=product_id, insight=insight)


@router.post("/{product_id}/insight/refresh", response_model=InsightResponse)
async def refresh_insight(product_id: int, catalog: CatalogClient = Depends(get_catalog)):
    """Discard the cached recommendation and generate a new one."""
    catalog.refresh_insight(product_id)
    try:
        insight = await catalog.ai_insight(product_id)
    except GatewayError as e:
        raise http_error(e)
    return InsightResponse(product_id=product_id, insight=insight)
