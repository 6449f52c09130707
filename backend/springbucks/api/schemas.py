"""Pydantic schemas for API request/response."""

from pydantic import BaseModel, Field


class CoffeeResponse(BaseModel):
    id: int
    name: str
    price_minor: int
    price: str


class CoffeeCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    price: str  # decimal string, e.g. "20.00"


class OrderCreateRequest(BaseModel):
    customer: str = Field(min_length=1, max_length=50)
    items: list[str] = Field(min_length=1)  # coffee names


class OrderStateUpdateRequest(BaseModel):
    state: str  # OrderState name, e.g. "PAID"


class OrderResponse(BaseModel):
    id: int
    customer: str
    state: str
    items: list[CoffeeResponse]
    total: str
    create_time: str
    update_time: str


class OrderStateUpdateResponse(BaseModel):
    id: int
    state: str
    updated: bool
