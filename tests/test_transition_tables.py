from __future__ import annotations

import itertools

import pytest

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
from app.modules.lifecycle.transitions import (
    GOAL_TRANSITIONS,
    LESSON_TRANSITIONS,
    QUOTE_TRANSITIONS,
    display_label,
    is_terminal,
    resulting_goal_status,
    resulting_lesson_status,
    resulting_quote_status,
    resulting_rate_status,
    valid_transitions,
)

EXPECTED_LESSON_EDGES = {
    (LessonStatusEnum.REQUESTED, LessonTransitionEnum.ACCEPT): LessonStatusEnum.ACCEPTED,
    (LessonStatusEnum.REQUESTED, LessonTransitionEnum.REJECT): LessonStatusEnum.REJECTED,
    (LessonStatusEnum.ACCEPTED, LessonTransitionEnum.DEFINE): LessonStatusEnum.DEFINED,
    (LessonStatusEnum.DEFINED, LessonTransitionEnum.COMPLETE): LessonStatusEnum.COMPLETED,
    (LessonStatusEnum.DEFINED, LessonTransitionEnum.VOID): LessonStatusEnum.VOIDED,
}

EXPECTED_QUOTE_EDGES = {
    (QuoteStatusEnum.CREATED, QuoteTransitionEnum.ACCEPT): QuoteStatusEnum.ACCEPTED,
    (QuoteStatusEnum.CREATED, QuoteTransitionEnum.REJECT): QuoteStatusEnum.REJECTED,
    (QuoteStatusEnum.CREATED, QuoteTransitionEnum.EXPIRE): QuoteStatusEnum.EXPIRED,
}

EXPECTED_GOAL_EDGES = {
    (GoalStatusEnum.CREATED, GoalTransitionEnum.START): GoalStatusEnum.IN_PROGRESS,
    (GoalStatusEnum.CREATED, GoalTransitionEnum.ABANDON): GoalStatusEnum.ABANDONED,
    (GoalStatusEnum.IN_PROGRESS, GoalTransitionEnum.COMPLETE): GoalStatusEnum.ACHIEVED,
    (GoalStatusEnum.IN_PROGRESS, GoalTransitionEnum.ABANDON): GoalStatusEnum.ABANDONED,
    (GoalStatusEnum.ACHIEVED, GoalTransitionEnum.ABANDON): GoalStatusEnum.ABANDONED,
}

EXPECTED_RATE_EDGES = {
    (RateStatusEnum.ACTIVE, RateTransitionEnum.DEACTIVATE): RateStatusEnum.INACTIVE,
    (RateStatusEnum.INACTIVE, RateTransitionEnum.ACTIVATE): RateStatusEnum.ACTIVE,
}


@pytest.mark.parametrize(
    ("status", "transition"),
    list(itertools.product(LessonStatusEnum, LessonTransitionEnum)),
)
def test_lesson_table_maps_only_defined_pairs(
    status: LessonStatusEnum,
    transition: LessonTransitionEnum,
) -> None:
    assert resulting_lesson_status(status, transition) == EXPECTED_LESSON_EDGES.get((status, transition))


@pytest.mark.parametrize(
    ("status", "transition"),
    list(itertools.product(QuoteStatusEnum, QuoteTransitionEnum)),
)
def test_quote_table_maps_only_defined_pairs(
    status: QuoteStatusEnum,
    transition: QuoteTransitionEnum,
) -> None:
    assert resulting_quote_status(status, transition) == EXPECTED_QUOTE_EDGES.get((status, transition))


@pytest.mark.parametrize(
    ("status", "transition"),
    list(itertools.product(RateStatusEnum, RateTransitionEnum)),
)
def test_rate_table_maps_only_defined_pairs(status: RateStatusEnum, transition: RateTransitionEnum) -> None:
    assert resulting_rate_status(status, transition) == EXPECTED_RATE_EDGES.get((status, transition))


@pytest.mark.parametrize(
    ("status", "transition"),
    list(itertools.product(GoalStatusEnum, GoalTransitionEnum)),
)
def test_goal_table_maps_only_defined_pairs(status: GoalStatusEnum, transition: GoalTransitionEnum) -> None:
    assert resulting_goal_status(status, transition) == EXPECTED_GOAL_EDGES.get((status, transition))


def test_terminal_statuses() -> None:
    assert {status for status in LessonStatusEnum if is_terminal(LESSON_TRANSITIONS, status)} == {
        LessonStatusEnum.REJECTED,
        LessonStatusEnum.COMPLETED,
        LessonStatusEnum.VOIDED,
    }
    assert {status for status in QuoteStatusEnum if is_terminal(QUOTE_TRANSITIONS, status)} == {
        QuoteStatusEnum.ACCEPTED,
        QuoteStatusEnum.REJECTED,
        QuoteStatusEnum.EXPIRED,
    }
    assert {status for status in GoalStatusEnum if is_terminal(GOAL_TRANSITIONS, status)} == {GoalStatusEnum.ABANDONED}


def test_valid_transitions_from_defined() -> None:
    assert valid_transitions(LESSON_TRANSITIONS, LessonStatusEnum.DEFINED) == [
        LessonTransitionEnum.COMPLETE,
        LessonTransitionEnum.VOID,
    ]
    assert valid_transitions(LESSON_TRANSITIONS, LessonStatusEnum.VOIDED) == []


def test_tables_are_read_only() -> None:
    with pytest.raises(TypeError):
        LESSON_TRANSITIONS[LessonStatusEnum.COMPLETED] = {}  # type: ignore[index]
    with pytest.raises(TypeError):
        LESSON_TRANSITIONS[LessonStatusEnum.COMPLETED][LessonTransitionEnum.VOID] = LessonStatusEnum.VOIDED  # type: ignore[index]


def test_display_label() -> None:
    assert display_label(LessonStatusEnum.REQUESTED) == "Requested"
    assert display_label(QuoteTransitionEnum.EXPIRE) == "Expire"
    assert display_label(QuoteStatusEnum.CREATED) == "Created"
