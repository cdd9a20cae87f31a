"""Teachers schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import LessonTypeEnum, RateStatusEnum, RateTransitionEnum


class TeacherProfileUpsert(BaseModel):
    """Create or update teacher profile request."""

    display_name: str = Field(min_length=1, max_length=128)
    bio: str = ""
    experience_years: int = Field(default=0, ge=0, le=80)


class TeacherProfileRead(BaseModel):
    """Teacher profile response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    display_name: str
    bio: str
    experience_years: int
    created_at: datetime
    updated_at: datetime


class HourlyRateCreate(BaseModel):
    """Create hourly rate request."""

    lesson_type: LessonTypeEnum
    rate_in_cents: int = Field(gt=0)


class HourlyRateTransitionRequest(BaseModel):
    """Activate or deactivate an hourly rate."""

    transition: RateTransitionEnum
    context: dict = Field(default_factory=dict)


class HourlyRateStatusRead(BaseModel):
    """Hourly rate status record."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: RateStatusEnum
    context: dict
    created_at: datetime


class HourlyRateRead(BaseModel):
    """Hourly rate response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    teacher_id: UUID
    lesson_type: LessonTypeEnum
    rate_in_cents: int
    current_status: HourlyRateStatusRead | None
    created_at: datetime
    updated_at: datetime


class EligibleTeacher(BaseModel):
    """Teacher returned by the directory with their active rates by lesson type."""

    teacher_id: UUID
    display_name: str
    active_rates: dict[LessonTypeEnum, int] = Field(default_factory=dict)

    def active_rate_for(self, lesson_type: LessonTypeEnum) -> int | None:
        return self.active_rates.get(lesson_type)
