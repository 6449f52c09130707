"""Database engine and session setup."""

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from springbucks.config import DATABASE_URL


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    """Creation and last-update timestamps shared by all tables."""

    create_time: Mapped[str] = mapped_column(
        String(30), default=lambda: datetime.now().isoformat()
    )
    update_time: Mapped[str] = mapped_column(
        String(30),
        default=lambda: datetime.now().isoformat(),
        onupdate=lambda: datetime.now().isoformat(),
    )


engine = create_async_engine(DATABASE_URL, echo=False)
async_session_factory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncSession:
    """Dependency for FastAPI routes."""
    async with async_session_factory() as session:
        yield session


async def init_db():
    """Create all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
