"""Immutable snapshots of store rows, safe to cache and share between requests."""

from pydantic import BaseModel, ConfigDict


class CoffeeRecord(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    price_minor: int
    create_time: str
    update_time: str
