"""Initial catalog data."""

import logging

from springbucks.models.coffee import Coffee
from springbucks.services.coffee_store import CoffeeStore

logger = logging.getLogger(__name__)

DEFAULT_CATALOG = [
    ("espresso", 2000),
    ("latte", 2500),
    ("capuccino", 2500),
    ("mocha", 3000),
    ("macchiato", 3000),
]


async def seed_catalog(
    store: CoffeeStore, catalog: list[tuple[str, int]] = DEFAULT_CATALOG
) -> int:
    """Insert the default coffees when the catalog is empty. Returns rows added."""
    if await store.find_all():
        return 0
    for name, price_minor in catalog:
        await store.save(Coffee(name=name, price_minor=price_minor))
    logger.info(f"Seeded catalog with {len(catalog)} coffees")
    return len(catalog)
