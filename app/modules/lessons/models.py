"""Lessons ORM models."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Enum as SAEnum, ForeignKey, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BaseModelMixin, StatusRecordMixin
from app.core.enums import LessonStatusEnum


class Lesson(BaseModelMixin, Base):
    """Lesson materialized from exactly one lesson quote."""

    __tablename__ = "lessons"

    quote_id: Mapped[UUID] = mapped_column(
        ForeignKey("lesson_quotes.id", ondelete="RESTRICT"),
        unique=True,
        nullable=False,
        index=True,
    )
    current_status_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(
            "lesson_statuses.id",
            ondelete="RESTRICT",
            use_alter=True,
            name="fk_lessons_current_status",
        ),
        nullable=True,
    )

    quote = relationship("LessonQuote")
    current_status: Mapped["LessonStatus | None"] = relationship(foreign_keys=[current_status_id])

    @property
    def student_id(self) -> UUID:
        return self.quote.lesson_request.student_id

    @property
    def teacher_id(self) -> UUID:
        return self.quote.teacher_id


class LessonStatus(StatusRecordMixin, Base):
    """Immutable status record of a lesson."""

    __tablename__ = "lesson_statuses"

    lesson_id: Mapped[UUID] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[LessonStatusEnum] = mapped_column(
        SAEnum(LessonStatusEnum, name="lesson_status_enum", native_enum=False),
        nullable=False,
    )
    context: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)


class LessonSummary(BaseModelMixin, Base):
    """Teacher's written summary and homework for a completed lesson."""

    __tablename__ = "lesson_summaries"

    lesson_id: Mapped[UUID] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    homework: Mapped[str] = mapped_column(Text, nullable=False)
