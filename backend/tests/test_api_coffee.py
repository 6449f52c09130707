"""Tests for coffee API endpoints."""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from springbucks.api.deps import get_coffee_service
from springbucks.errors import StoreError
from springbucks.main import app
from springbucks.models.coffee import Coffee
from springbucks.models.database import Base, get_db
from springbucks.services.cache import MemoryCache
from springbucks.services.cache_aside import CacheAside
from springbucks.services.coffee import CoffeeService
from springbucks.services.coffee_store import CoffeeStore
from springbucks.tasks.seed import seed_catalog


@pytest_asyncio.fixture
async def coffee_service():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async def override_get_db():
        async with session_factory() as session:
            yield session

    store = CoffeeStore(session_factory)
    await seed_catalog(store)
    service = CoffeeService(store, CacheAside(MemoryCache(), "coffee", 60000))

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_coffee_service] = lambda: service

    yield service

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest_asyncio.fixture
async def client(coffee_service):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_list_coffee(client):
    resp = await client.get("/api/coffee")
    assert resp.status_code == 200
    data = resp.json()
    assert [c["name"] for c in data] == [
        "espresso",
        "latte",
        "capuccino",
        "mocha",
        "macchiato",
    ]
    assert data[0]["price_minor"] == 2000
    assert data[0]["price"] == "CNY 20.00"


@pytest.mark.asyncio
async def test_find_coffee_by_name(client):
    resp = await client.get("/api/coffee", params={"name": "Espresso"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "espresso"


@pytest.mark.asyncio
async def test_find_coffee_not_found(client):
    resp = await client.get("/api/coffee", params={"name": "flat white"})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_create_coffee_shows_up_in_list(client):
    await client.get("/api/coffee")
    resp = await client.post("/api/coffee", json={"name": "americano", "price": "22.50"})
    assert resp.status_code == 201
    assert resp.json()["price_minor"] == 2250

    names = [c["name"] for c in (await client.get("/api/coffee")).json()]
    assert "americano" in names


@pytest.mark.asyncio
async def test_create_duplicate_coffee(client):
    resp = await client.post("/api/coffee", json={"name": "latte", "price": "25.00"})
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_create_coffee_bad_price(client):
    resp = await client.post("/api/coffee", json={"name": "americano", "price": "1.234"})
    assert resp.status_code == 422


@pytest.mark.asyncio
@pytest.mark.parametrize("price", ["1e30", "100000000000000000000.00"])
async def test_create_coffee_price_out_of_range(client, price):
    resp = await client.post("/api/coffee", json={"name": "americano", "price": price})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_delete_coffee(client):
    espresso = (await client.get("/api/coffee", params={"name": "espresso"})).json()
    resp = await client.delete(f"/api/coffee/{espresso['id']}")
    assert resp.status_code == 204
    resp = await client.get("/api/coffee", params={"name": "espresso"})
    assert resp.status_code == 404
    resp = await client.delete(f"/api/coffee/{espresso['id']}")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_refresh(client, coffee_service):
    await client.get("/api/coffee")
    await coffee_service.store.save(Coffee(name="americano", price_minor=2200))
    assert len((await client.get("/api/coffee")).json()) == 5

    resp = await client.post("/api/coffee/refresh")
    assert resp.status_code == 200
    assert len((await client.get("/api/coffee")).json()) == 6


@pytest.mark.asyncio
async def test_store_failure_returns_503(client, coffee_service, monkeypatch):
    async def broken_find_all():
        raise StoreError("disk I/O error")

    monkeypatch.setattr(coffee_service.store, "find_all", broken_find_all)
    resp = await client.get("/api/coffee")
    assert resp.status_code == 503
