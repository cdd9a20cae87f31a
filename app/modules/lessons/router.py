"""Lessons API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.modules.identity.service import get_current_user
from app.modules.lessons.schemas import (
    LessonCreate,
    LessonRead,
    LessonStatusRead,
    LessonSummaryCreate,
    LessonSummaryRead,
    LessonTransitionRequest,
    LessonTransitionsRead,
)
from app.modules.lessons.service import LessonsService, get_lessons_service
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/lessons", tags=["lessons"])


@router.post("", response_model=LessonRead, status_code=status.HTTP_201_CREATED)
async def create_lesson(
    payload: LessonCreate,
    service: LessonsService = Depends(get_lessons_service),
    current_user=Depends(get_current_user),
) -> LessonRead:
    """Create lesson from a quote (admin only)."""
    lesson = await service.create_lesson(payload.quote_id, current_user)
    return LessonRead.model_validate(lesson)


@router.get("/my", response_model=Page[LessonRead])
async def list_my_lessons(
    pagination=Depends(get_pagination_params),
    service: LessonsService = Depends(get_lessons_service),
    current_user=Depends(get_current_user),
) -> Page[LessonRead]:
    """List lessons for current user."""
    items, total = await service.list_lessons(current_user, pagination.limit, pagination.offset)
    serialized = [LessonRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.get("/{lesson_id}", response_model=LessonRead)
async def get_lesson(
    lesson_id: UUID,
    service: LessonsService = Depends(get_lessons_service),
    current_user=Depends(get_current_user),
) -> LessonRead:
    """Get lesson with its quote and request."""
    lesson = await service.get_lesson(lesson_id, current_user)
    return LessonRead.model_validate(lesson)


@router.get("/{lesson_id}/statuses", response_model=list[LessonStatusRead])
async def list_lesson_statuses(
    lesson_id: UUID,
    service: LessonsService = Depends(get_lessons_service),
    current_user=Depends(get_current_user),
) -> list[LessonStatusRead]:
    """Lesson status history."""
    records = await service.get_lesson_history(lesson_id, current_user)
    return [LessonStatusRead.model_validate(record) for record in records]


@router.get("/{lesson_id}/transitions", response_model=LessonTransitionsRead)
async def list_lesson_transitions(
    lesson_id: UUID,
    service: LessonsService = Depends(get_lessons_service),
    current_user=Depends(get_current_user),
) -> LessonTransitionsRead:
    """Transitions current user can apply to the lesson."""
    return await service.get_available_transitions(lesson_id, current_user)


@router.post("/{lesson_id}/transitions", response_model=LessonRead)
async def apply_lesson_transition(
    lesson_id: UUID,
    payload: LessonTransitionRequest,
    service: LessonsService = Depends(get_lessons_service),
    current_user=Depends(get_current_user),
) -> LessonRead:
    """Apply lifecycle transition to a lesson."""
    lesson = await service.update_status(lesson_id, payload.transition, payload.context, current_user)
    return LessonRead.model_validate(lesson)


@router.post("/{lesson_id}/summary", response_model=LessonSummaryRead, status_code=status.HTTP_201_CREATED)
async def create_lesson_summary(
    lesson_id: UUID,
    payload: LessonSummaryCreate,
    service: LessonsService = Depends(get_lessons_service),
    current_user=Depends(get_current_user),
) -> LessonSummaryRead:
    """Write the summary and homework of a completed lesson (assigned teacher only)."""
    summary = await service.create_summary(lesson_id, payload, current_user)
    return LessonSummaryRead.model_validate(summary)


@router.get("/{lesson_id}/summary", response_model=LessonSummaryRead)
async def get_lesson_summary(
    lesson_id: UUID,
    service: LessonsService = Depends(get_lessons_service),
    current_user=Depends(get_current_user),
) -> LessonSummaryRead:
    """Lesson summary."""
    summary = await service.get_summary(lesson_id, current_user)
    return LessonSummaryRead.model_validate(summary)
