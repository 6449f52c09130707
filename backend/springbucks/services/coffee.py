"""Coffee catalog service with a cache-aside read path."""

import logging
import string

from springbucks.models.coffee import Coffee
from springbucks.models.records import CoffeeRecord
from springbucks.services.cache_aside import CacheAside
from springbucks.services.codec import coffee_codec, coffee_list_codec
from springbucks.services.coffee_store import CoffeeStore

logger = logging.getLogger(__name__)

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


class CoffeeService:
    """Serves the catalog from cache, loading from the store on miss.

    Writes go to the store first and then evict the whole namespace, so the
    next read repopulates from fresh data.
    """

    def __init__(self, store: CoffeeStore, cache: CacheAside):
        self.store = store
        self.cache = cache

    async def list_all(self) -> list[CoffeeRecord]:
        async def load() -> list[CoffeeRecord]:
            coffees = await self.store.find_all()
            return [CoffeeRecord.model_validate(c) for c in coffees]

        return await self.cache.read(self.cache.key(), load, coffee_list_codec)

    async def find_by_name(self, name: str) -> CoffeeRecord | None:
        # ASCII-only folding, the same equivalence SQLite lower() applies in the store.
        folded = name.translate(_ASCII_LOWER)

        async def load() -> CoffeeRecord | None:
            coffee = await self.store.find_by_name(name)
            return CoffeeRecord.model_validate(coffee) if coffee else None

        record = await self.cache.read(self.cache.key("name", folded), load, coffee_codec)
        logger.debug(f"Coffee lookup {name!r}: {'found' if record else 'missing'}")
        return record

    async def refresh(self) -> None:
        """Drop every cached catalog entry."""
        await self.cache.invalidate()

    async def save_coffee(self, name: str, price_minor: int) -> CoffeeRecord:
        coffee = await self.store.save(Coffee(name=name, price_minor=price_minor))
        logger.info(f"Saved coffee {coffee!r}")
        await self.cache.invalidate()
        return CoffeeRecord.model_validate(coffee)

    async def delete_coffee(self, coffee_id: int) -> None:
        await self.store.delete_by_id(coffee_id)
        logger.info(f"Deleted coffee {coffee_id}")
        await self.cache.invalidate()
