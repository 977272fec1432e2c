"""Sample catalog seeding - creates each sample product, then its store prices."""
import asyncio
import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Optional, Sequence

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from pricewise.config import get_settings
from pricewise.exceptions import SeedError
from pricewise.services.catalog import CatalogClient
from pricewise.services.invalidation import Mutation

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
SAMPLE_FILE = DATA_DIR / "sample_products.json"


class SamplePrice(BaseModel):
    store: str
    price: Decimal = Field(ge=0)
    in_stock: bool = True

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SampleProduct(BaseModel):
    name: str
    category: str
    description: str = ""
    image_url: str = ""
    tags: list[str] = []
    prices: list[SamplePrice] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True


@dataclass
class SeedResult:
    products_created: int = 0
    prices_added: int = 0
    product_ids: list[int] = field(default_factory=list)


def load_sample_products(path: Path = SAMPLE_FILE) -> list[SampleProduct]:
    """Load the fixed sample dataset, in file order."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return [SampleProduct.model_validate(item) for item in data]


async def seed_sample_data(
    catalog: CatalogClient,
    samples: Optional[Sequence[SampleProduct]] = None,
) -> SeedResult:
    """
    Create every sample product and then add its prices under the new id.

    Runs strictly in order. The first failed call stops seeding and is
    raised as a SeedError; whatever was created before it stays in the
    store. Product lists are invalidated exactly once, either on success
    or, when at least one product was created, just before SeedError.
    """
    if samples is None:
        samples = load_sample_products()

    gateway = catalog.gateway
    result = SeedResult()

    for index, sample in enumerate(samples):
        try:
            product = await gateway.create_product(
                sample.name,
                sample.category,
                sample.description,
                sample.image_url,
                list(sample.tags),
            )
            result.products_created += 1
            result.product_ids.append(product.id)

            for price in sample.prices:
                await gateway.add_price_entry(product.id, price.store, price.price, price.in_stock)
                result.prices_added += 1
        except Exception as e:
            logger.error(f"Seeding stopped at sample #{index + 1} ({sample.name}): {e}")
            if result.products_created > 0:
                # Products created so far stay in the store and must show up in lists
                catalog.apply_mutation(Mutation.SEED)
            raise SeedError(
                e,
                sample_index=index,
                sample_name=sample.name,
                products_created=result.products_created,
                prices_added=result.prices_added,
            ) from e

        logger.debug(f"Seeded {sample.name} with {len(sample.prices)} prices")

    catalog.apply_mutation(Mutation.SEED)
    logger.info(
        f"Seeding complete: {result.products_created} products, {result.prices_added} prices"
    )
    return result


async def seed_all():
    """Seed the configured remote store with the sample catalog."""
    from pricewise.services.gateway import HttpGateway

    settings = get_settings()
    logger.info(f"Seeding sample catalog into {settings.remote_api_url}...")

    async with HttpGateway() as gateway:
        catalog = CatalogClient(gateway)
        result = await seed_sample_data(catalog)

    logger.info(f"Created products: {result.product_ids}")
    return result


if __name__ == "__main__":
    logging.basicConfig(level=get_settings().log_level)
    asyncio.run(seed_all())
