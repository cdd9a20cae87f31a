"""Core enums used across modules."""

from enum import StrEnum


class RoleEnum(StrEnum):
    """System roles."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class LessonTypeEnum(StrEnum):
    """Kinds of lessons a student can request."""

    VOICE = "VOICE"
    GUITAR = "GUITAR"
    BASS = "BASS"
    DRUMS = "DRUMS"


class LessonStatusEnum(StrEnum):
    """Lesson lifecycle status."""

    REQUESTED = "REQUESTED"
    ACCEPTED = "ACCEPTED"
    DEFINED = "DEFINED"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    VOIDED = "VOIDED"


class LessonTransitionEnum(StrEnum):
    """Transitions that can be requested against a lesson."""

    ACCEPT = "ACCEPT"
    DEFINE = "DEFINE"
    COMPLETE = "COMPLETE"
    REJECT = "REJECT"
    VOID = "VOID"


class QuoteStatusEnum(StrEnum):
    """Lesson quote lifecycle status."""

    CREATED = "CREATED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class QuoteTransitionEnum(StrEnum):
    """Transitions that can be applied to a lesson quote."""

    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    EXPIRE = "EXPIRE"


class RateStatusEnum(StrEnum):
    """Teacher hourly rate status."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class RateTransitionEnum(StrEnum):
    """Transitions for teacher hourly rates."""

    ACTIVATE = "ACTIVATE"
    DEACTIVATE = "DEACTIVATE"


class GoalStatusEnum(StrEnum):
    """Learning goal status attached to a lesson."""

    CREATED = "CREATED"
    IN_PROGRESS = "IN_PROGRESS"
    ACHIEVED = "ACHIEVED"
    ABANDONED = "ABANDONED"


class GoalTransitionEnum(StrEnum):
    """Transitions for learning goals."""

    START = "START"
    COMPLETE = "COMPLETE"
    ABANDON = "ABANDON"


class EntityKindEnum(StrEnum):
    """Entities whose status is tracked in a ledger."""

    LESSON = "lesson"
    LESSON_QUOTE = "lesson_quote"
    GOAL = "goal"
