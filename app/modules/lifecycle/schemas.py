"""Lifecycle schemas."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel

from app.core.enums import EntityKindEnum


class CurrentStatusRead(BaseModel):
    """Current status of a lesson, lesson quote or goal."""

    entity_kind: EntityKindEnum
    entity_id: UUID
    status: str
    status_id: UUID
