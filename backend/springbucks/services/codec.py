"""JSON codec for cached values, built on pydantic TypeAdapter."""

from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from springbucks.errors import SerializationError
from springbucks.models.records import CoffeeRecord

T = TypeVar("T")


class RecordCodec(Generic[T]):
    """Encodes values of one type to bytes and back.

    Decoding validates against the type, so an entry written by an
    incompatible schema raises SerializationError instead of returning
    a half-built value.
    """

    def __init__(self, value_type: Any):
        self._adapter: TypeAdapter[T] = TypeAdapter(value_type)

    def encode(self, value: T) -> bytes:
        try:
            return self._adapter.dump_json(value)
        except PydanticSerializationError as e:
            raise SerializationError(f"cannot encode {type(value).__name__}: {e}") from e

    def decode(self, data: bytes) -> T:
        try:
            return self._adapter.validate_json(data)
        except ValidationError as e:
            raise SerializationError(f"corrupt cache entry: {e.error_count()} errors") from e


coffee_list_codec: RecordCodec[list[CoffeeRecord]] = RecordCodec(list[CoffeeRecord])
coffee_codec: RecordCodec[CoffeeRecord | None] = RecordCodec(CoffeeRecord | None)
