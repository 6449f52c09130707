"""Coffee order service."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from springbucks.errors import NotFoundError, StoreError
from springbucks.models.coffee import Coffee, CoffeeOrder, OrderState

logger = logging.getLogger(__name__)


class OrderService:
    """Creates orders and moves them through their states. Orders are never cached."""

    async def create_order(
        self, session: AsyncSession, customer: str, *coffees: Coffee
    ) -> CoffeeOrder:
        order = CoffeeOrder(
            customer=customer,
            items=[await session.merge(c) for c in coffees],
            state=OrderState.INIT,
        )
        session.add(order)
        await self._commit(session)
        logger.info(f"New Order: {order!r}")
        return order

    async def get_order(self, session: AsyncSession, order_id: int) -> CoffeeOrder:
        order = await session.get(CoffeeOrder, order_id)
        if order is None:
            raise NotFoundError("CoffeeOrder", order_id)
        return order

    async def update_state(
        self, session: AsyncSession, order: CoffeeOrder, state: OrderState
    ) -> bool:
        """Move ``order`` to ``state``.

        Returns False without writing anything when the order is already in
        that state; a no-op transition is not an error.
        """
        if order.state == state:
            logger.warning(f"Order {order.id} is already in state {state.name}")
            return False
        logger.info(f"Order {order.id}: {order.state.name} -> {state.name}")
        order.state = state
        order = await session.merge(order)
        await self._commit(session)
        logger.info(f"Updated Order: {order!r}")
        return True

    async def _commit(self, session: AsyncSession) -> None:
        try:
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise StoreError(f"order commit failed: {e}") from e


order_service = OrderService()
