"""Database setup for async SQLAlchemy 2.0."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, MetaData
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncAttrs, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.core.config import get_settings
from app.shared.exceptions import ConflictException

logger = logging.getLogger(__name__)

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(UTC)


class Base(AsyncAttrs, DeclarativeBase):
    """Declarative base class for all ORM models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class UUIDMixin:
    """Provide UUID primary key."""

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)


class TimestampMixin:
    """Provide UTC audit timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


class BaseModelMixin(UUIDMixin, TimestampMixin):
    """Base mixin used by all business entities."""


class StatusRecordMixin(UUIDMixin):
    """Base mixin for append-only status records."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )


def is_retryable_conflict(exc: DBAPIError) -> bool:
    """Return True when the driver reports a serialization failure or deadlock."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate in RETRYABLE_SQLSTATES


class TransactionManager:
    """Atomic units of work on top of the request session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """Run block inside a SAVEPOINT; nothing inside is visible if it raises.

        Storage-level conflicts are surfaced as ``ConflictException`` and never retried here.
        """
        try:
            async with self.session.begin_nested():
                yield
        except IntegrityError as exc:
            logger.info("Integrity conflict inside unit of work: %s", exc.orig)
            raise ConflictException("Operation conflicts with existing data") from exc
        except DBAPIError as exc:
            if is_retryable_conflict(exc):
                logger.info("Serialization conflict inside unit of work: %s", exc.orig)
                raise ConflictException("Concurrent update detected, retry the request") from exc
            raise


settings = get_settings()
engine = create_async_engine(settings.database_url, echo=settings.debug, pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides DB session per request."""
    async with SessionLocal() as session:
        try:
            yield session
            await session.commit()
        except DBAPIError as exc:
            await session.rollback()
            if is_retryable_conflict(exc):
                raise ConflictException("Concurrent update detected, retry the request") from exc
            raise
        except Exception:
            await session.rollback()
            raise


async def close_engine() -> None:
    """Close SQLAlchemy engine."""
    await engine.dispose()
