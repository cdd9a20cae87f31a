"""Authorization rules for lifecycle transitions.

Decisions only use data the caller already loaded; nothing here touches storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from app.core.enums import GoalTransitionEnum, LessonTransitionEnum, QuoteTransitionEnum, RoleEnum

TEACHER_LESSON_TRANSITIONS = frozenset(
    {
        LessonTransitionEnum.ACCEPT,
        LessonTransitionEnum.DEFINE,
        LessonTransitionEnum.COMPLETE,
        LessonTransitionEnum.REJECT,
        LessonTransitionEnum.VOID,
    },
)
STUDENT_QUOTE_TRANSITIONS = frozenset({QuoteTransitionEnum.ACCEPT, QuoteTransitionEnum.REJECT})
TEACHER_GOAL_TRANSITIONS = frozenset(GoalTransitionEnum)


@dataclass(frozen=True, slots=True)
class Participants:
    """Student who requested the lesson and teacher who quoted it."""

    student_id: UUID
    teacher_id: UUID


def can_transition_lesson(
    actor_id: UUID,
    role: RoleEnum,
    participants: Participants,
    transition: LessonTransitionEnum,
) -> bool:
    """Only the teacher assigned through the quote may move a lesson."""
    if transition not in TEACHER_LESSON_TRANSITIONS:
        return False
    return role == RoleEnum.TEACHER and actor_id == participants.teacher_id


def can_transition_quote(
    actor_id: UUID,
    role: RoleEnum,
    participants: Participants,
    transition: QuoteTransitionEnum,
) -> bool:
    """Only the requesting student may accept or reject; expiry is system-only."""
    if transition not in STUDENT_QUOTE_TRANSITIONS:
        return False
    return role == RoleEnum.STUDENT and actor_id == participants.student_id


def can_manage_goal(
    actor_id: UUID,
    role: RoleEnum,
    participants: Participants,
    transition: GoalTransitionEnum | None = None,
) -> bool:
    """The lesson's teacher creates goals and moves them; ``None`` means creation."""
    if transition is not None and transition not in TEACHER_GOAL_TRANSITIONS:
        return False
    return role == RoleEnum.TEACHER and actor_id == participants.teacher_id


def can_summarize_lesson(actor_id: UUID, role: RoleEnum, participants: Participants) -> bool:
    """Only the teacher who gave the lesson writes its summary."""
    return role == RoleEnum.TEACHER and actor_id == participants.teacher_id


def can_view(actor_id: UUID, role: RoleEnum, participants: Participants) -> bool:
    """Participants and admins may read lessons, quotes and their history."""
    if role == RoleEnum.ADMIN:
        return True
    return actor_id in (participants.student_id, participants.teacher_id)
