"""Lesson requests API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.modules.identity.service import get_current_user
from app.modules.lesson_requests.schemas import (
    LessonRequestCreate,
    LessonRequestRead,
    LessonRequestSubmitted,
)
from app.modules.lesson_requests.service import LessonRequestsService, get_lesson_requests_service
from app.modules.quotes.schemas import QuoteRead
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/lesson-requests", tags=["lesson-requests"])


@router.post("", response_model=LessonRequestSubmitted, status_code=status.HTTP_201_CREATED)
async def submit_lesson_request(
    payload: LessonRequestCreate,
    service: LessonRequestsService = Depends(get_lesson_requests_service),
    current_user=Depends(get_current_user),
) -> LessonRequestSubmitted:
    """Submit lesson request and receive generated quotes."""
    request, quotes = await service.submit_request(payload, current_user)
    return LessonRequestSubmitted(
        request=LessonRequestRead.model_validate(request),
        quotes=[QuoteRead.model_validate(quote) for quote in quotes],
    )


@router.get("/my", response_model=Page[LessonRequestRead])
async def list_my_lesson_requests(
    pagination=Depends(get_pagination_params),
    service: LessonRequestsService = Depends(get_lesson_requests_service),
    current_user=Depends(get_current_user),
) -> Page[LessonRequestRead]:
    """List own lesson requests."""
    items, total = await service.list_my_requests(current_user, pagination.limit, pagination.offset)
    serialized = [LessonRequestRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.get("/{request_id}", response_model=LessonRequestRead)
async def get_lesson_request(
    request_id: UUID,
    service: LessonRequestsService = Depends(get_lesson_requests_service),
    current_user=Depends(get_current_user),
) -> LessonRequestRead:
    """Get lesson request."""
    request = await service.get_request(request_id, current_user)
    return LessonRequestRead.model_validate(request)


@router.get("/{request_id}/quotes", response_model=list[QuoteRead])
async def list_lesson_request_quotes(
    request_id: UUID,
    service: LessonRequestsService = Depends(get_lesson_requests_service),
    current_user=Depends(get_current_user),
) -> list[QuoteRead]:
    """List quotes of a lesson request."""
    quotes = await service.list_request_quotes(request_id, current_user)
    return [QuoteRead.model_validate(quote) for quote in quotes]
