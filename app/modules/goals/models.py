"""Learning goal ORM models."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import CheckConstraint, Enum as SAEnum, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BaseModelMixin, StatusRecordMixin
from app.core.enums import GoalStatusEnum


class Goal(BaseModelMixin, Base):
    """Learning goal a teacher sets for a lesson."""

    __tablename__ = "goals"
    __table_args__ = (
        CheckConstraint("estimated_lesson_count > 0", name="positive_estimated_lesson_count"),
    )

    lesson_id: Mapped[UUID] = mapped_column(
        ForeignKey("lessons.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    estimated_lesson_count: Mapped[int] = mapped_column(Integer, nullable=False)
    current_status_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(
            "goal_statuses.id",
            ondelete="RESTRICT",
            use_alter=True,
            name="fk_goals_current_status",
        ),
        nullable=True,
    )

    lesson = relationship("Lesson")
    current_status: Mapped["GoalStatus | None"] = relationship(foreign_keys=[current_status_id])

    @property
    def student_id(self) -> UUID:
        return self.lesson.student_id

    @property
    def teacher_id(self) -> UUID:
        return self.lesson.teacher_id


class GoalStatus(StatusRecordMixin, Base):
    """Immutable status record of a goal."""

    __tablename__ = "goal_statuses"

    goal_id: Mapped[UUID] = mapped_column(
        ForeignKey("goals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[GoalStatusEnum] = mapped_column(
        SAEnum(GoalStatusEnum, name="goal_status_enum", native_enum=False),
        nullable=False,
    )
    context: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)
