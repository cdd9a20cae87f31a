"""Lesson request ORM models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, Enum as SAEnum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin
from app.core.enums import LessonTypeEnum


class LessonRequest(BaseModelMixin, Base):
    """Student's description of a wanted lesson; never changed after submission."""

    __tablename__ = "lesson_requests"
    __table_args__ = (CheckConstraint("duration_minutes > 0", name="positive_duration"),)

    student_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    lesson_type: Mapped[LessonTypeEnum] = mapped_column(
        SAEnum(LessonTypeEnum, name="lesson_type_enum", native_enum=False),
        nullable=False,
    )
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    address: Mapped[str] = mapped_column(String(512), nullable=False)
