"""Lessons schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from app.core.enums import LessonStatusEnum, LessonTransitionEnum
from app.modules.lesson_requests.schemas import LessonRequestRead
from app.modules.quotes.schemas import QuoteRead


class LessonCreate(BaseModel):
    """Create lesson directly from a quote."""

    quote_id: UUID


class LessonTransitionRequest(BaseModel):
    """Apply a lifecycle transition to a lesson."""

    transition: LessonTransitionEnum
    context: dict = Field(default_factory=dict)


class LessonStatusRead(BaseModel):
    """Lesson status record."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    lesson_id: UUID
    status: LessonStatusEnum
    context: dict
    created_at: datetime


class LessonQuoteDetail(QuoteRead):
    """Quote behind a lesson together with its request."""

    lesson_request: LessonRequestRead


class LessonRead(BaseModel):
    """Lesson response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    quote_id: UUID
    student_id: UUID
    teacher_id: UUID
    current_status: LessonStatusRead | None
    quote: LessonQuoteDetail
    created_at: datetime
    updated_at: datetime


class AvailableTransition(BaseModel):
    """Transition the acting user may apply right now."""

    transition: LessonTransitionEnum
    label: str
    resulting_status: LessonStatusEnum


class LessonTransitionsRead(BaseModel):
    """Current status with transitions available from it."""

    lesson_id: UUID
    current_status: LessonStatusEnum
    is_terminal: bool
    transitions: list[AvailableTransition]


class LessonSummaryCreate(BaseModel):
    """Summary and homework written after a completed lesson."""

    summary: Annotated[str, StringConstraints(strip_whitespace=True, min_length=10, max_length=5000)]
    homework: Annotated[str, StringConstraints(strip_whitespace=True, min_length=5, max_length=2000)]


class LessonSummaryRead(BaseModel):
    """Lesson summary response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    lesson_id: UUID
    summary: str
    homework: str
    created_at: datetime
    updated_at: datetime
