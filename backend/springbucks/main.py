"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from springbucks import config
from springbucks.api.coffee import router as coffee_router
from springbucks.api.order import router as order_router
from springbucks.errors import (
    CacheUnavailableError,
    ConstraintError,
    NotFoundError,
    StoreError,
)
from springbucks.models.database import async_session_factory, init_db
from springbucks.services.cache import CacheBackend, build_cache
from springbucks.services.cache_aside import CacheAside
from springbucks.services.coffee import CoffeeService
from springbucks.services.coffee_store import CoffeeStore
from springbucks.tasks.scheduler import start_scheduler, stop_scheduler
from springbucks.tasks.seed import seed_catalog

logger = logging.getLogger(__name__)


def create_coffee_service(
    cache: CacheBackend, session_factory: async_sessionmaker[AsyncSession]
) -> CoffeeService:
    """Wire the catalog service from configuration."""
    cache_aside = CacheAside(
        cache,
        config.CACHE_NAMESPACE,
        config.CACHE_TTL_MS,
        op_timeout_ms=config.CACHE_OP_TIMEOUT_MS,
        store_timeout_ms=config.STORE_TIMEOUT_MS,
        strict=config.CACHE_STRICT,
        cache_null_values=config.CACHE_NULL_VALUES,
        single_flight=config.CACHE_SINGLE_FLIGHT,
    )
    return CoffeeService(CoffeeStore(session_factory), cache_aside)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await init_db()
    cache = build_cache(config.REDIS_URL)
    try:
        connect = getattr(cache, "connect", None)
        if connect is not None:
            try:
                await connect()
            except CacheUnavailableError as e:
                if config.CACHE_STRICT:
                    logger.error(f"Cache unavailable at startup: {e}")
                    raise
                logger.warning(f"Cache unavailable at startup, serving from store: {e}")
        coffee_service = create_coffee_service(cache, async_session_factory)
        if config.SEED_CATALOG:
            await seed_catalog(coffee_service.store)
        app.state.coffee_service = coffee_service
        start_scheduler(coffee_service, config.CACHE_WARM_INTERVAL)
        yield
    finally:
        stop_scheduler()
        await cache.close()


app = FastAPI(title="SpringBucks", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(coffee_router)
app.include_router(order_router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ConstraintError)
async def constraint_error_handler(request: Request, exc: ConstraintError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"Store failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Store unavailable"})


@app.exception_handler(CacheUnavailableError)
async def cache_error_handler(request: Request, exc: CacheUnavailableError):
    logger.error(f"Cache failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Cache unavailable"})


@app.get("/api/health")
async def health_check():
    return {"status": "ok"}
