"""Teachers ORM models."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import CheckConstraint, Enum as SAEnum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BaseModelMixin, StatusRecordMixin
from app.core.enums import LessonTypeEnum, RateStatusEnum


class TeacherProfile(BaseModelMixin, Base):
    """Teacher profile linked to user account."""

    __tablename__ = "teacher_profiles"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    display_name: Mapped[str] = mapped_column(String(128), nullable=False)
    bio: Mapped[str] = mapped_column(Text, default="", nullable=False)
    experience_years: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    user = relationship("User", back_populates="teacher_profile")
    hourly_rates: Mapped[list["TeacherLessonHourlyRate"]] = relationship(
        primaryjoin="TeacherProfile.user_id == foreign(TeacherLessonHourlyRate.teacher_id)",
        viewonly=True,
    )


class TeacherLessonHourlyRate(BaseModelMixin, Base):
    """Price a teacher charges per hour for one lesson type."""

    __tablename__ = "teacher_lesson_hourly_rates"
    __table_args__ = (
        UniqueConstraint("teacher_id", "lesson_type", name="uq_teacher_lesson_hourly_rates_teacher_type"),
        CheckConstraint("rate_in_cents > 0", name="positive_rate"),
    )

    teacher_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    lesson_type: Mapped[LessonTypeEnum] = mapped_column(
        SAEnum(LessonTypeEnum, name="lesson_type_enum", native_enum=False),
        nullable=False,
    )
    rate_in_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    current_status_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(
            "teacher_lesson_hourly_rate_statuses.id",
            ondelete="RESTRICT",
            use_alter=True,
            name="fk_teacher_lesson_hourly_rates_current_status",
        ),
        nullable=True,
    )

    current_status: Mapped["TeacherLessonHourlyRateStatus | None"] = relationship(
        foreign_keys=[current_status_id],
    )


class TeacherLessonHourlyRateStatus(StatusRecordMixin, Base):
    """Immutable status record of an hourly rate."""

    __tablename__ = "teacher_lesson_hourly_rate_statuses"

    rate_id: Mapped[UUID] = mapped_column(
        ForeignKey("teacher_lesson_hourly_rates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[RateStatusEnum] = mapped_column(
        SAEnum(RateStatusEnum, name="rate_status_enum", native_enum=False),
        nullable=False,
    )
    context: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)
