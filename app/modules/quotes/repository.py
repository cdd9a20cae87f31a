"""Lesson quote repository layer."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enums import QuoteStatusEnum
from app.modules.lesson_requests.models import LessonRequest
from app.modules.lifecycle.ledger import StatusLedger
from app.modules.quotes.models import LessonQuote, LessonQuoteStatus


class QuotesRepository:
    """DB operations for lesson quotes and their status ledger."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.ledger = StatusLedger(
            session,
            LessonQuote,
            LessonQuoteStatus,
            owner_field="lesson_quote_id",
            label="Lesson quote",
        )

    @staticmethod
    def _with_relations(stmt):
        return stmt.execution_options(populate_existing=True).options(
            selectinload(LessonQuote.lesson_request),
            selectinload(LessonQuote.current_status),
        )

    async def create_quote(
        self,
        lesson_request_id: UUID,
        teacher_id: UUID,
        hourly_rate_in_cents: int,
        cost_in_cents: int,
    ) -> LessonQuote:
        quote = LessonQuote(
            lesson_request_id=lesson_request_id,
            teacher_id=teacher_id,
            hourly_rate_in_cents=hourly_rate_in_cents,
            cost_in_cents=cost_in_cents,
        )
        self.session.add(quote)
        await self.session.flush()
        return quote

    async def get_quote_by_id(self, quote_id: UUID) -> LessonQuote | None:
        stmt = self._with_relations(select(LessonQuote).where(LessonQuote.id == quote_id))
        return await self.session.scalar(stmt)

    async def get_quote_for_update(self, quote_id: UUID) -> LessonQuote | None:
        stmt = self._with_relations(
            select(LessonQuote).where(LessonQuote.id == quote_id).with_for_update(of=LessonQuote),
        )
        return await self.session.scalar(stmt)

    async def lock_request(self, lesson_request_id: UUID) -> None:
        """Serialize quote decisions of one lesson request behind its row lock."""
        stmt = select(LessonRequest.id).where(LessonRequest.id == lesson_request_id).with_for_update()
        await self.session.execute(stmt)

    async def list_quotes_for_request(self, lesson_request_id: UUID) -> list[LessonQuote]:
        stmt = self._with_relations(
            select(LessonQuote)
            .where(LessonQuote.lesson_request_id == lesson_request_id)
            .order_by(LessonQuote.created_at.asc()),
        )
        return list((await self.session.scalars(stmt)).all())

    async def append_status(
        self,
        quote: LessonQuote,
        status: QuoteStatusEnum,
        context: Mapping[str, Any] | None = None,
    ) -> LessonQuoteStatus:
        return await self.ledger.append_status(quote, status, context)

    async def current_status(self, quote_id: UUID) -> LessonQuoteStatus:
        return await self.ledger.current_status(quote_id)

    async def history(self, quote_id: UUID) -> list[LessonQuoteStatus]:
        return await self.ledger.history(quote_id)
