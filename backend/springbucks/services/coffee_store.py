"""Coffee catalog persistence on async SQLAlchemy."""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from springbucks.errors import ConstraintError, NotFoundError, StoreError
from springbucks.models.coffee import Coffee

logger = logging.getLogger(__name__)


class CoffeeStore:
    """Source of truth for coffee records.

    Opens its own session per call so it can be shared by the cache layer
    across requests.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_all(self) -> list[Coffee]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(Coffee).order_by(Coffee.id))
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreError(f"find_all failed: {e}") from e

    async def find_by_name(self, name: str) -> Coffee | None:
        """Case-insensitive exact match on the coffee name."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(Coffee).where(func.lower(Coffee.name) == func.lower(name))
                )
                return result.scalars().first()
        except SQLAlchemyError as e:
            raise StoreError(f"find_by_name failed: {e}") from e

    async def get(self, coffee_id: int) -> Coffee:
        try:
            async with self._session_factory() as session:
                coffee = await session.get(Coffee, coffee_id)
        except SQLAlchemyError as e:
            raise StoreError(f"get failed: {e}") from e
        if coffee is None:
            raise NotFoundError("Coffee", coffee_id)
        return coffee

    async def save(self, coffee: Coffee) -> Coffee:
        name = coffee.name
        try:
            async with self._session_factory() as session:
                coffee = await session.merge(coffee)
                await session.commit()
                await session.refresh(coffee)
                return coffee
        except IntegrityError as e:
            raise ConstraintError(f"cannot save coffee {name!r}: {e.orig}") from e
        except SQLAlchemyError as e:
            raise StoreError(f"save failed: {e}") from e

    async def delete_by_id(self, coffee_id: int) -> None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(delete(Coffee).where(Coffee.id == coffee_id))
                await session.commit()
        except IntegrityError as e:
            raise ConstraintError(f"coffee {coffee_id} is still referenced: {e.orig}") from e
        except SQLAlchemyError as e:
            raise StoreError(f"delete_by_id failed: {e}") from e
        if result.rowcount == 0:
            raise NotFoundError("Coffee", coffee_id)
