"""Coffee, CoffeeOrder and OrderState models."""

import enum

from sqlalchemy import Column, Enum, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship
from springbucks.models.database import Base, TimestampMixin


class OrderState(enum.Enum):
    INIT = 0
    PAID = 1
    BREWING = 2
    BREWED = 3
    TAKEN = 4
    CANCELLED = 5


order_coffee = Table(
    "t_order_coffee",
    Base.metadata,
    Column("coffee_order_id", ForeignKey("t_order.id"), primary_key=True),
    Column("items_id", ForeignKey("t_coffee.id"), primary_key=True),
)


class Coffee(TimestampMixin, Base):
    __tablename__ = "t_coffee"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True)
    price_minor: Mapped[int] = mapped_column(Integer)  # e.g. 2000 == 20.00

    def __repr__(self) -> str:
        return f"Coffee(id={self.id}, name={self.name!r}, price_minor={self.price_minor})"


class CoffeeOrder(TimestampMixin, Base):
    __tablename__ = "t_order"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    customer: Mapped[str] = mapped_column(String(50))
    state: Mapped[OrderState] = mapped_column(
        Enum(OrderState, native_enum=False), nullable=False
    )
    items: Mapped[list[Coffee]] = relationship(
        secondary=order_coffee, order_by=Coffee.id, lazy="selectin"
    )

    def __repr__(self) -> str:
        names = [c.name for c in self.items]
        return (
            f"CoffeeOrder(id={self.id}, customer={self.customer!r}, "
            f"state={self.state.name}, items={names})"
        )
