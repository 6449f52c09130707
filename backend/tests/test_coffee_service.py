"""Tests for the cached coffee catalog service."""

from collections import Counter

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from springbucks.errors import ConstraintError
from springbucks.models.coffee import Coffee
from springbucks.models.database import Base
from springbucks.services.cache import MemoryCache
from springbucks.services.cache_aside import CacheAside
from springbucks.services.coffee import CoffeeService
from springbucks.services.coffee_store import CoffeeStore

SEED = [
    ("espresso", 100),
    ("latte", 125),
    ("capuccino", 125),
    ("mocha", 150),
    ("macchiato", 150),
]


class CountingStore(CoffeeStore):
    """Counts store queries so tests can tell a cache hit from a miss."""

    def __init__(self, session_factory):
        super().__init__(session_factory)
        self.calls = Counter()

    async def find_all(self):
        self.calls["find_all"] += 1
        return await super().find_all()

    async def find_by_name(self, name):
        self.calls["find_by_name"] += 1
        return await super().find_by_name(name)


class ManualClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest_asyncio.fixture
async def store():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    store = CountingStore(session_factory)
    for name, price in SEED:
        await store.save(Coffee(name=name, price_minor=price))
    yield store
    await engine.dispose()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def service(store, clock):
    return CoffeeService(store, CacheAside(MemoryCache(clock=clock), "coffee", 5000))


@pytest.mark.asyncio
async def test_list_all_is_cached(service, store):
    first = await service.list_all()
    second = await service.list_all()
    assert [c.name for c in first] == [name for name, _ in SEED]
    assert first == second
    assert store.calls["find_all"] == 1


@pytest.mark.asyncio
async def test_list_all_reloads_after_ttl(service, store, clock):
    await service.list_all()
    clock.now += 5.0
    await service.list_all()
    assert store.calls["find_all"] == 2


@pytest.mark.asyncio
async def test_find_by_name_espresso(service):
    coffee = await service.find_by_name("espresso")
    assert coffee is not None
    assert coffee.name == "espresso"
    assert coffee.price_minor == 100


@pytest.mark.asyncio
async def test_find_by_name_is_case_insensitive_and_shares_cache(service, store):
    a = await service.find_by_name("Espresso")
    b = await service.find_by_name("ESPRESSO")
    assert a == b
    assert a.name == "espresso"
    assert store.calls["find_by_name"] == 1


@pytest.mark.asyncio
async def test_find_by_name_does_not_trim_whitespace(service):
    assert await service.find_by_name(" espresso ") is None
    assert await service.find_by_name("espresso ") is None


@pytest.mark.asyncio
async def test_find_by_name_folds_like_the_store(service, store):
    """Only ASCII letters fold, in the cache key and in the store query alike."""
    await store.save(Coffee(name="Éclair latte", price_minor=180))

    found = await service.find_by_name("ÉCLAIR LATTE")
    assert found is not None
    assert found.name == "Éclair latte"
    # "é" vs "É" is not an equal name to the store, so no cached hit either
    assert await service.find_by_name("éclair latte") is None
    assert store.calls["find_by_name"] == 2


@pytest.mark.asyncio
async def test_find_by_name_missing_is_not_cached(service, store):
    assert await service.find_by_name("flat white") is None
    assert await service.find_by_name("flat white") is None
    assert store.calls["find_by_name"] == 2


@pytest.mark.asyncio
async def test_refresh_forces_reload(service, store):
    await service.list_all()
    await service.find_by_name("latte")
    await service.refresh()
    await service.list_all()
    await service.find_by_name("latte")
    assert store.calls["find_all"] == 2
    assert store.calls["find_by_name"] == 2


@pytest.mark.asyncio
async def test_external_change_is_stale_until_refresh(service, store):
    """Store changes made behind the service stay invisible until TTL or refresh."""
    await service.list_all()
    await store.save(Coffee(name="americano", price_minor=110))

    assert len(await service.list_all()) == len(SEED)
    await service.refresh()
    assert len(await service.list_all()) == len(SEED) + 1


@pytest.mark.asyncio
async def test_save_coffee_evicts_cache(service, store):
    await service.list_all()
    record = await service.save_coffee("americano", 110)
    assert record.id is not None

    names = [c.name for c in await service.list_all()]
    assert "americano" in names
    assert store.calls["find_all"] == 2


@pytest.mark.asyncio
async def test_save_duplicate_keeps_cache(service, store):
    await service.list_all()
    with pytest.raises(ConstraintError):
        await service.save_coffee("latte", 999)
    await service.list_all()
    assert store.calls["find_all"] == 1


@pytest.mark.asyncio
async def test_delete_coffee_evicts_cache(service):
    espresso = await service.find_by_name("espresso")
    await service.delete_coffee(espresso.id)
    assert await service.find_by_name("espresso") is None
    assert "espresso" not in [c.name for c in await service.list_all()]
