"""Order API routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from springbucks.api.deps import get_coffee_service
from springbucks.api.schemas import (
    CoffeeResponse,
    OrderCreateRequest,
    OrderResponse,
    OrderStateUpdateRequest,
    OrderStateUpdateResponse,
)
from springbucks.errors import NotFoundError
from springbucks.models.coffee import Coffee, CoffeeOrder, OrderState
from springbucks.models.database import get_db
from springbucks.services.coffee import CoffeeService
from springbucks.services.money import format_price
from springbucks.services.order import order_service

router = APIRouter(prefix="/api/order", tags=["order"])


def to_response(order: CoffeeOrder) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        customer=order.customer,
        state=order.state.name,
        items=[
            CoffeeResponse(
                id=c.id,
                name=c.name,
                price_minor=c.price_minor,
                price=format_price(c.price_minor),
            )
            for c in order.items
        ],
        total=format_price(sum(c.price_minor for c in order.items)),
        create_time=order.create_time,
        update_time=order.update_time,
    )


@router.post("", response_model=OrderResponse, status_code=201)
async def create_order(
    req: OrderCreateRequest,
    db: AsyncSession = Depends(get_db),
    coffee_service: CoffeeService = Depends(get_coffee_service),
):
    coffees = []
    for name in req.items:
        # Catalog lookups go through the cache; the row itself comes from this session.
        record = await coffee_service.find_by_name(name)
        coffee = await db.get(Coffee, record.id) if record else None
        if coffee is None:
            raise HTTPException(status_code=404, detail=f"Coffee not found: {name}")
        coffees.append(coffee)
    order = await order_service.create_order(db, req.customer, *coffees)
    return to_response(order)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: int, db: AsyncSession = Depends(get_db)):
    try:
        order = await order_service.get_order(db, order_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    return to_response(order)


@router.put("/{order_id}/state", response_model=OrderStateUpdateResponse)
async def update_order_state(
    order_id: int, req: OrderStateUpdateRequest, db: AsyncSession = Depends(get_db)
):
    try:
        order = await order_service.get_order(db, order_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    try:
        state = OrderState[req.state.upper()]
    except KeyError:
        raise HTTPException(status_code=422, detail=f"Unknown order state: {req.state}")
    updated = await order_service.update_state(db, order, state)
    return OrderStateUpdateResponse(id=order.id, state=order.state.name, updated=updated)
