"""Lesson request schemas."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.enums import LessonTypeEnum
from app.modules.quotes.schemas import QuoteRead


class LessonRequestCreate(BaseModel):
    """Submit lesson request."""

    lesson_type: LessonTypeEnum
    start_at: datetime
    duration_minutes: int = Field(gt=0)
    address: str = Field(min_length=1, max_length=512)

    @field_validator("start_at")
    @classmethod
    def normalize_start_at(cls, value: datetime) -> datetime:
        # naive values are taken as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class LessonRequestRead(BaseModel):
    """Lesson request response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    lesson_type: LessonTypeEnum
    start_at: datetime
    duration_minutes: int
    address: str
    created_at: datetime
    updated_at: datetime


class LessonRequestSubmitted(BaseModel):
    """Submitted request with the quotes generated for it."""

    request: LessonRequestRead
    quotes: list[QuoteRead]
