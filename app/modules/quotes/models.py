"""Lesson quote ORM models."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import CheckConstraint, Enum as SAEnum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BaseModelMixin, StatusRecordMixin
from app.core.enums import QuoteStatusEnum


class LessonQuote(BaseModelMixin, Base):
    """Priced offer of one teacher for one lesson request."""

    __tablename__ = "lesson_quotes"
    __table_args__ = (
        UniqueConstraint("lesson_request_id", "teacher_id", name="uq_lesson_quotes_request_teacher"),
        CheckConstraint("cost_in_cents >= 0", name="non_negative_cost"),
    )

    lesson_request_id: Mapped[UUID] = mapped_column(
        ForeignKey("lesson_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    teacher_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    hourly_rate_in_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    cost_in_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    current_status_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(
            "lesson_quote_statuses.id",
            ondelete="RESTRICT",
            use_alter=True,
            name="fk_lesson_quotes_current_status",
        ),
        nullable=True,
    )

    lesson_request = relationship("LessonRequest")
    current_status: Mapped["LessonQuoteStatus | None"] = relationship(foreign_keys=[current_status_id])

    @property
    def student_id(self) -> UUID:
        return self.lesson_request.student_id


class LessonQuoteStatus(StatusRecordMixin, Base):
    """Immutable status record of a lesson quote."""

    __tablename__ = "lesson_quote_statuses"

    lesson_quote_id: Mapped[UUID] = mapped_column(
        ForeignKey("lesson_quotes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[QuoteStatusEnum] = mapped_column(
        SAEnum(QuoteStatusEnum, name="quote_status_enum", native_enum=False),
        nullable=False,
    )
    context: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)
