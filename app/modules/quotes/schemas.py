"""Lesson quote schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.core.enums import QuoteStatusEnum


class QuoteStatusRead(BaseModel):
    """Quote status record."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    lesson_quote_id: UUID
    status: QuoteStatusEnum
    context: dict
    created_at: datetime


class QuoteRead(BaseModel):
    """Lesson quote response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    lesson_request_id: UUID
    teacher_id: UUID
    hourly_rate_in_cents: int
    cost_in_cents: int
    current_status: QuoteStatusRead | None
    created_at: datetime
