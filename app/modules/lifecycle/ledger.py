"""Append-only status ledger shared by lessons, quotes and hourly rates."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from app.shared.exceptions import InconsistentStateError, NotFoundException

logger = logging.getLogger(__name__)

E = TypeVar("E")
R = TypeVar("R")


class StatusLedger(Generic[E, R]):
    """Status history for one entity type.

    The entity keeps a ``current_status`` pointer to its latest record. Records are
    only inserted, then the pointer is moved; both writes belong to the caller's
    unit of work and land together or not at all.
    """

    def __init__(
        self,
        session: AsyncSession,
        entity_model: type[E],
        record_model: type[R],
        owner_field: str,
        label: str,
    ) -> None:
        self.session = session
        self.entity_model = entity_model
        self.record_model = record_model
        self.owner_field = owner_field
        self.label = label

    async def append_status(
        self,
        entity: E,
        status: str,
        context: Mapping[str, Any] | None = None,
    ) -> R:
        record = self.record_model(status=status, context=dict(context or {}))
        setattr(record, self.owner_field, entity.id)
        self.session.add(record)
        await self.session.flush()

        entity.current_status_id = record.id
        await self.session.flush()
        set_committed_value(entity, "current_status", record)
        return record

    async def current_status(self, entity_id: UUID) -> R:
        stmt = (
            select(self.entity_model.id, self.record_model)
            .select_from(self.entity_model)
            .outerjoin(self.record_model, self.record_model.id == self.entity_model.current_status_id)
            .where(self.entity_model.id == entity_id)
        )
        row = (await self.session.execute(stmt)).one_or_none()
        if row is None:
            raise NotFoundException(f"{self.label} not found")

        record = row[1]
        if record is None or getattr(record, self.owner_field) != entity_id:
            logger.error(
                "%s %s has a missing or dangling current status pointer",
                self.label,
                entity_id,
            )
            raise InconsistentStateError(f"{self.label} {entity_id} has no valid current status")
        return record

    async def history(self, entity_id: UUID) -> list[R]:
        owner_column = getattr(self.record_model, self.owner_field)
        stmt = (
            select(self.record_model)
            .where(owner_column == entity_id)
            .order_by(self.record_model.created_at.asc(), self.record_model.id.asc())
        )
        return list((await self.session.scalars(stmt)).all())
