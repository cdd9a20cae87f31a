"""Transition tables for lesson, quote, hourly-rate and goal state machines.

Each table maps ``current status -> {transition: resulting status}``. A pair that
is not listed is illegal; lookups return ``None`` and callers turn that into an
invalid-transition error.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import TypeVar

from app.core.enums import (
    GoalStatusEnum,
    GoalTransitionEnum,
    LessonStatusEnum,
    LessonTransitionEnum,
    QuoteStatusEnum,
    QuoteTransitionEnum,
    RateStatusEnum,
    RateTransitionEnum,
)

S = TypeVar("S", bound=StrEnum)
T = TypeVar("T", bound=StrEnum)

TransitionTable = Mapping[S, Mapping[T, S]]


def _freeze(table: dict) -> Mapping:
    return MappingProxyType({state: MappingProxyType(edges) for state, edges in table.items()})


LESSON_TRANSITIONS: TransitionTable[LessonStatusEnum, LessonTransitionEnum] = _freeze(
    {
        LessonStatusEnum.REQUESTED: {
            LessonTransitionEnum.ACCEPT: LessonStatusEnum.ACCEPTED,
            LessonTransitionEnum.REJECT: LessonStatusEnum.REJECTED,
        },
        LessonStatusEnum.ACCEPTED: {
            LessonTransitionEnum.DEFINE: LessonStatusEnum.DEFINED,
        },
        LessonStatusEnum.DEFINED: {
            LessonTransitionEnum.COMPLETE: LessonStatusEnum.COMPLETED,
            LessonTransitionEnum.VOID: LessonStatusEnum.VOIDED,
        },
        LessonStatusEnum.COMPLETED: {},
        LessonStatusEnum.REJECTED: {},
        LessonStatusEnum.VOIDED: {},
    },
)

QUOTE_TRANSITIONS: TransitionTable[QuoteStatusEnum, QuoteTransitionEnum] = _freeze(
    {
        QuoteStatusEnum.CREATED: {
            QuoteTransitionEnum.ACCEPT: QuoteStatusEnum.ACCEPTED,
            QuoteTransitionEnum.REJECT: QuoteStatusEnum.REJECTED,
            QuoteTransitionEnum.EXPIRE: QuoteStatusEnum.EXPIRED,
        },
        QuoteStatusEnum.ACCEPTED: {},
        QuoteStatusEnum.REJECTED: {},
        QuoteStatusEnum.EXPIRED: {},
    },
)

RATE_TRANSITIONS: TransitionTable[RateStatusEnum, RateTransitionEnum] = _freeze(
    {
        RateStatusEnum.ACTIVE: {
            RateTransitionEnum.DEACTIVATE: RateStatusEnum.INACTIVE,
        },
        RateStatusEnum.INACTIVE: {
            RateTransitionEnum.ACTIVATE: RateStatusEnum.ACTIVE,
        },
    },
)


GOAL_TRANSITIONS: TransitionTable[GoalStatusEnum, GoalTransitionEnum] = _freeze(
    {
        GoalStatusEnum.CREATED: {
            GoalTransitionEnum.START: GoalStatusEnum.IN_PROGRESS,
            GoalTransitionEnum.ABANDON: GoalStatusEnum.ABANDONED,
        },
        GoalStatusEnum.IN_PROGRESS: {
            GoalTransitionEnum.COMPLETE: GoalStatusEnum.ACHIEVED,
            GoalTransitionEnum.ABANDON: GoalStatusEnum.ABANDONED,
        },
        # an achieved goal can still be retracted
        GoalStatusEnum.ACHIEVED: {
            GoalTransitionEnum.ABANDON: GoalStatusEnum.ABANDONED,
        },
        GoalStatusEnum.ABANDONED: {},
    },
)


def _lookup(table: TransitionTable[S, T], current: S, transition: T) -> S | None:
    edges = table.get(current)
    if edges is None:
        return None
    return edges.get(transition)


def resulting_lesson_status(
    current: LessonStatusEnum,
    transition: LessonTransitionEnum,
) -> LessonStatusEnum | None:
    """Return lesson status reached by ``transition`` or None if illegal."""
    return _lookup(LESSON_TRANSITIONS, current, transition)


def resulting_quote_status(
    current: QuoteStatusEnum,
    transition: QuoteTransitionEnum,
) -> QuoteStatusEnum | None:
    """Return quote status reached by ``transition`` or None if illegal."""
    return _lookup(QUOTE_TRANSITIONS, current, transition)


def resulting_rate_status(
    current: RateStatusEnum,
    transition: RateTransitionEnum,
) -> RateStatusEnum | None:
    """Return rate status reached by ``transition`` or None if illegal."""
    return _lookup(RATE_TRANSITIONS, current, transition)


def resulting_goal_status(
    current: GoalStatusEnum,
    transition: GoalTransitionEnum,
) -> GoalStatusEnum | None:
    """Return goal status reached by ``transition`` or None if illegal."""
    return _lookup(GOAL_TRANSITIONS, current, transition)


def valid_transitions(table: TransitionTable[S, T], current: S) -> list[T]:
    """List transitions legal from ``current`` in declaration order."""
    return list(table.get(current, {}))


def is_terminal(table: TransitionTable[S, T], current: S) -> bool:
    """A status is terminal when no transition leaves it."""
    return not table.get(current)


def display_label(value: StrEnum) -> str:
    """Human-friendly label, e.g. ``LESSON_QUOTE`` -> ``Lesson Quote``."""
    return " ".join(word.capitalize() for word in str(value).replace("_", " ").split())
