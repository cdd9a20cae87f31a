"""Lesson quote lifecycle: generation, acceptance and rejection."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.database import TransactionManager, get_db_session
from app.core.enums import QuoteStatusEnum, QuoteTransitionEnum
from app.core.metrics import record_transition
from app.modules.audit.repository import AuditRepository
from app.modules.identity.models import User
from app.modules.lesson_requests.models import LessonRequest
from app.modules.lessons.models import Lesson
from app.modules.lessons.service import LessonsService, build_lessons_service
from app.modules.lifecycle.guard import Participants, can_transition_quote, can_view
from app.modules.lifecycle.transitions import resulting_quote_status
from app.modules.quotes.models import LessonQuote, LessonQuoteStatus
from app.modules.quotes.repository import QuotesRepository
from app.modules.teachers.repository import TeachersRepository
from app.shared.exceptions import (
    AppException,
    ConflictException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
)

logger = logging.getLogger(__name__)


def calculate_cost_in_cents(hourly_rate_in_cents: int, duration_minutes: int) -> int:
    """Price of a lesson, rounded half up to whole cents."""
    cost = Decimal(hourly_rate_in_cents) * Decimal(duration_minutes) / Decimal(60)
    return int(cost.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def quote_participants(quote: LessonQuote) -> Participants:
    return Participants(student_id=quote.student_id, teacher_id=quote.teacher_id)


class QuotesService:
    """Lesson quote domain service."""

    def __init__(
        self,
        repository: QuotesRepository,
        teachers_repository: TeachersRepository,
        lessons_service: LessonsService,
        transactions: TransactionManager,
        audit_repository: AuditRepository,
        settings: Settings,
    ) -> None:
        self.repository = repository
        self.teachers_repository = teachers_repository
        self.lessons_service = lessons_service
        self.transactions = transactions
        self.audit_repository = audit_repository
        self.settings = settings

    async def create_quotes_for_request(self, request: LessonRequest) -> list[LessonQuote]:
        """Quote every eligible teacher for ``request``.

        Each quote is written in its own savepoint; a teacher that cannot be
        quoted is logged and skipped without affecting the others.
        """
        teachers = await self.teachers_repository.find_eligible_teachers(
            request.lesson_type,
            self.settings.quote_teacher_limit,
        )
        if not teachers:
            logger.info("No eligible teachers for %s request %s", request.lesson_type, request.id)
            return []

        quotes: list[LessonQuote] = []
        for teacher in teachers:
            rate = teacher.active_rate_for(request.lesson_type)
            if rate is None:
                logger.warning(
                    "Teacher %s has no active %s rate, skipping request %s",
                    teacher.teacher_id,
                    request.lesson_type,
                    request.id,
                )
                continue

            try:
                async with self.transactions.atomic():
                    quote = await self.repository.create_quote(
                        lesson_request_id=request.id,
                        teacher_id=teacher.teacher_id,
                        hourly_rate_in_cents=rate,
                        cost_in_cents=calculate_cost_in_cents(rate, request.duration_minutes),
                    )
                    await self.repository.append_status(quote, QuoteStatusEnum.CREATED)
            except AppException as exc:
                logger.warning(
                    "Could not quote teacher %s for request %s: %s",
                    teacher.teacher_id,
                    request.id,
                    exc.message,
                )
                continue

            quotes.append(quote)

        logger.info("Created %s quotes for request %s", len(quotes), request.id)
        return quotes

    async def accept_quote(self, quote_id: UUID, actor: User) -> Lesson:
        """Accept a quote, create its lesson and expire every open sibling quote.

        The lesson request row is locked first so decisions on quotes of one
        request never interleave.
        """
        async with self.transactions.atomic():
            quote = await self.repository.get_quote_by_id(quote_id)
            if quote is None:
                raise NotFoundException("Lesson quote not found")
            if not can_transition_quote(
                actor.id,
                actor.role.name,
                quote_participants(quote),
                QuoteTransitionEnum.ACCEPT,
            ):
                record_transition("lesson_quote", QuoteTransitionEnum.ACCEPT, "forbidden")
                raise ForbiddenException("Only the requesting student can accept this quote")

            await self.repository.lock_request(quote.lesson_request_id)
            quote = await self.repository.get_quote_for_update(quote_id)
            current = await self.repository.current_status(quote.id)

            if current.status == QuoteStatusEnum.ACCEPTED:
                record_transition("lesson_quote", QuoteTransitionEnum.ACCEPT, "conflict")
                raise ConflictException("Lesson quote is already accepted")
            if resulting_quote_status(current.status, QuoteTransitionEnum.ACCEPT) is None:
                record_transition("lesson_quote", QuoteTransitionEnum.ACCEPT, "invalid")
                raise InvalidTransitionException(f"Cannot accept a quote that is {current.status}")

            lesson, expired = await self.lessons_service.materialize_lesson(
                quote,
                current.status,
                {"accepted_by": str(actor.id)},
            )

            await self.audit_repository.create_audit_log(
                actor_id=actor.id,
                action="lesson_quote.accept",
                entity_type="lesson_quote",
                entity_id=str(quote.id),
                payload={
                    "lesson_id": str(lesson.id),
                    "expired_quote_ids": [str(sibling_id) for sibling_id in expired],
                },
            )

        record_transition("lesson_quote", QuoteTransitionEnum.ACCEPT, "applied")
        logger.info(
            "Student %s accepted quote %s, lesson %s created, %s sibling quotes expired",
            actor.id,
            quote_id,
            lesson.id,
            len(expired),
        )
        return await self.lessons_service.get_lesson(lesson.id, actor)

    async def reject_quote(self, quote_id: UUID, actor: User) -> LessonQuote:
        """Reject a quote; sibling quotes are left as they are."""
        async with self.transactions.atomic():
            quote = await self.repository.get_quote_by_id(quote_id)
            if quote is None:
                raise NotFoundException("Lesson quote not found")
            if not can_transition_quote(
                actor.id,
                actor.role.name,
                quote_participants(quote),
                QuoteTransitionEnum.REJECT,
            ):
                record_transition("lesson_quote", QuoteTransitionEnum.REJECT, "forbidden")
                raise ForbiddenException("Only the requesting student can reject this quote")

            await self.repository.lock_request(quote.lesson_request_id)
            quote = await self.repository.get_quote_for_update(quote_id)
            if await self.lessons_service.get_lesson_for_quote(quote.id) is not None:
                record_transition("lesson_quote", QuoteTransitionEnum.REJECT, "conflict")
                raise ConflictException("Lesson quote already has a lesson")
            current = await self.repository.current_status(quote.id)

            new_status = resulting_quote_status(current.status, QuoteTransitionEnum.REJECT)
            if new_status is None:
                record_transition("lesson_quote", QuoteTransitionEnum.REJECT, "invalid")
                raise InvalidTransitionException(f"Cannot reject a quote that is {current.status}")

            await self.repository.append_status(quote, new_status)
            await self.audit_repository.create_audit_log(
                actor_id=actor.id,
                action="lesson_quote.reject",
                entity_type="lesson_quote",
                entity_id=str(quote.id),
                payload={"from": current.status, "to": new_status},
            )

        record_transition("lesson_quote", QuoteTransitionEnum.REJECT, "applied")
        return quote

    async def get_quote(self, quote_id: UUID, actor: User) -> LessonQuote:
        quote = await self.repository.get_quote_by_id(quote_id)
        if quote is None:
            raise NotFoundException("Lesson quote not found")
        if not can_view(actor.id, actor.role.name, quote_participants(quote)):
            raise ForbiddenException("You are not allowed to view this quote")
        return quote

    async def list_quotes_for_request(self, request: LessonRequest, actor: User) -> list[LessonQuote]:
        """Quotes of a request visible to ``actor``; teachers only see their own."""
        quotes = await self.repository.list_quotes_for_request(request.id)
        return [quote for quote in quotes if can_view(actor.id, actor.role.name, quote_participants(quote))]

    async def get_quote_history(self, quote_id: UUID, actor: User) -> list[LessonQuoteStatus]:
        quote = await self.get_quote(quote_id, actor)
        return await self.repository.history(quote.id)


def build_quotes_service(session: AsyncSession) -> QuotesService:
    return QuotesService(
        repository=QuotesRepository(session),
        teachers_repository=TeachersRepository(session),
        lessons_service=build_lessons_service(session),
        transactions=TransactionManager(session),
        audit_repository=AuditRepository(session),
        settings=get_settings(),
    )


async def get_quotes_service(session: AsyncSession = Depends(get_db_session)) -> QuotesService:
    """Dependency provider for quotes service."""
    return build_quotes_service(session)
