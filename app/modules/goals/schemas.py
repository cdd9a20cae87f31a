"""Goals schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import GoalStatusEnum, GoalTransitionEnum


class GoalCreate(BaseModel):
    """Set a learning goal for a lesson."""

    lesson_id: UUID
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=5000)
    estimated_lesson_count: int = Field(gt=0, le=100)


class GoalTransitionRequest(BaseModel):
    """Apply a lifecycle transition to a goal."""

    transition: GoalTransitionEnum
    context: dict = Field(default_factory=dict)


class GoalStatusRead(BaseModel):
    """Goal status record."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    goal_id: UUID
    status: GoalStatusEnum
    context: dict
    created_at: datetime


class GoalRead(BaseModel):
    """Goal response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    lesson_id: UUID
    title: str
    description: str
    estimated_lesson_count: int
    current_status: GoalStatusRead | None
    created_at: datetime
    updated_at: datetime
