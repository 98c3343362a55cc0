"""
Database configuration for the corridor backend.

Async SQLAlchemy engine, session factory, declarative base and shared mixins.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy.sql import func

from .config import settings
from .core.utils import utc_now


def build_engine(database_url: str, **kwargs):
    """Create an async engine; pool tuning only applies to server databases."""
    if not database_url.startswith("sqlite"):
        kwargs.setdefault("pool_pre_ping", True)
        kwargs.setdefault("pool_recycle", 3600)
    return create_async_engine(
        database_url,
        echo=settings.database_echo,
        future=True,
        connect_args=settings.database_connect_args(),
        **kwargs,
    )


engine = build_engine(settings.database_url)

AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

Base = declarative_base()


class IdMixin:
    """Autoincrement integer primary key."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class TimestampMixin:
    """Mixin to add created and updated timestamps to models."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        default=utc_now,
        onupdate=utc_now,
    )


async def get_db() -> AsyncSession:
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


def import_models() -> None:
    """Register every module's tables on ``Base.metadata``."""
    from .modules.directory import models as directory_models  # noqa: F401
    from .modules.listings import models as listings_models  # noqa: F401
    from .modules.occupancy import models as occupancy_models  # noqa: F401
    from .modules.trust import models as trust_models  # noqa: F401


async def init_db(bind=None):
    """Initialize database tables on ``bind`` or the application engine."""
    import_models()

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
