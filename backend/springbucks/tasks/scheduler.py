"""Background scheduler that keeps the coffee catalog cache warm."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from springbucks.services.coffee import CoffeeService

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


async def warm_catalog_cache(coffee_service: CoffeeService):
    """Drop the cached catalog and load it again from the store."""
    try:
        await coffee_service.refresh()
        coffees = await coffee_service.list_all()
        logger.info(f"Warmed catalog cache with {len(coffees)} coffees")
    except Exception as e:
        logger.error(f"Failed to warm catalog cache: {e}")


def start_scheduler(coffee_service: CoffeeService, interval: int):
    """Start the background scheduler; an interval of 0 disables warming."""
    if interval <= 0:
        logger.info("Cache warming disabled")
        return
    scheduler.add_job(
        warm_catalog_cache,
        trigger=IntervalTrigger(seconds=interval),
        args=[coffee_service],
        id="warm_catalog_cache",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(f"Scheduler started, warming catalog cache every {interval}s")


def stop_scheduler():
    """Stop the background scheduler."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
