"""Coffee catalog API routes."""

from fastapi import APIRouter, Depends, HTTPException, Response

from springbucks.api.deps import get_coffee_service
from springbucks.api.schemas import CoffeeCreateRequest, CoffeeResponse
from springbucks.errors import ConstraintError, NotFoundError
from springbucks.models.records import CoffeeRecord
from springbucks.services.coffee import CoffeeService
from springbucks.services.money import format_price, parse_price

router = APIRouter(prefix="/api/coffee", tags=["coffee"])


def to_response(record: CoffeeRecord) -> CoffeeResponse:
    return CoffeeResponse(
        id=record.id,
        name=record.name,
        price_minor=record.price_minor,
        price=format_price(record.price_minor),
    )


@router.get("", response_model=list[CoffeeResponse] | CoffeeResponse)
async def list_coffee(
    name: str | None = None, service: CoffeeService = Depends(get_coffee_service)
):
    """List the catalog, or look up a single coffee with ``?name=``."""
    if name is not None:
        record = await service.find_by_name(name)
        if record is None:
            raise HTTPException(status_code=404, detail="Coffee not found")
        return to_response(record)
    return [to_response(r) for r in await service.list_all()]


@router.post("", response_model=CoffeeResponse, status_code=201)
async def create_coffee(
    req: CoffeeCreateRequest, service: CoffeeService = Depends(get_coffee_service)
):
    try:
        price_minor = parse_price(req.price)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    try:
        record = await service.save_coffee(req.name, price_minor)
    except ConstraintError:
        raise HTTPException(status_code=409, detail="Coffee already exists")
    return to_response(record)


@router.delete("/{coffee_id}", status_code=204)
async def delete_coffee(
    coffee_id: int, service: CoffeeService = Depends(get_coffee_service)
):
    try:
        await service.delete_coffee(coffee_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Coffee not found")
    return Response(status_code=204)


@router.post("/refresh")
async def refresh_cache(service: CoffeeService = Depends(get_coffee_service)):
    """Drop all cached catalog entries."""
    await service.refresh()
    return {"status": "ok"}
