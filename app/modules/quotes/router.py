"""Lesson quotes API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from app.modules.identity.service import get_current_user
from app.modules.lessons.schemas import LessonRead
from app.modules.quotes.schemas import QuoteRead, QuoteStatusRead
from app.modules.quotes.service import QuotesService, get_quotes_service

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.get("/{quote_id}", response_model=QuoteRead)
async def get_quote(
    quote_id: UUID,
    service: QuotesService = Depends(get_quotes_service),
    current_user=Depends(get_current_user),
) -> QuoteRead:
    """Get lesson quote."""
    quote = await service.get_quote(quote_id, current_user)
    return QuoteRead.model_validate(quote)


@router.get("/{quote_id}/statuses", response_model=list[QuoteStatusRead])
async def list_quote_statuses(
    quote_id: UUID,
    service: QuotesService = Depends(get_quotes_service),
    current_user=Depends(get_current_user),
) -> list[QuoteStatusRead]:
    """Lesson quote status history."""
    records = await service.get_quote_history(quote_id, current_user)
    return [QuoteStatusRead.model_validate(record) for record in records]


@router.post("/{quote_id}/accept", response_model=LessonRead)
async def accept_quote(
    quote_id: UUID,
    service: QuotesService = Depends(get_quotes_service),
    current_user=Depends(get_current_user),
) -> LessonRead:
    """Accept quote and create its lesson."""
    lesson = await service.accept_quote(quote_id, current_user)
    return LessonRead.model_validate(lesson)


@router.post("/{quote_id}/reject", response_model=QuoteRead)
async def reject_quote(
    quote_id: UUID,
    service: QuotesService = Depends(get_quotes_service),
    current_user=Depends(get_current_user),
) -> QuoteRead:
    """Reject quote."""
    quote = await service.reject_quote(quote_id, current_user)
    return QuoteRead.model_validate(quote)
