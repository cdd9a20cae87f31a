"""Lessons business logic layer: creation, lifecycle transitions and summaries."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import TransactionManager, get_db_session
from app.core.enums import (
    LessonStatusEnum,
    LessonTransitionEnum,
    QuoteStatusEnum,
    QuoteTransitionEnum,
    RoleEnum,
)
from app.core.metrics import record_transition
from app.modules.audit.repository import AuditRepository
from app.modules.identity.models import User
from app.modules.lessons.models import Lesson, LessonStatus, LessonSummary
from app.modules.lessons.repository import LessonsRepository
from app.modules.lessons.schemas import AvailableTransition, LessonSummaryCreate, LessonTransitionsRead
from app.modules.lifecycle.guard import Participants, can_summarize_lesson, can_transition_lesson, can_view
from app.modules.lifecycle.transitions import (
    LESSON_TRANSITIONS,
    QUOTE_TRANSITIONS,
    display_label,
    is_terminal,
    resulting_lesson_status,
    resulting_quote_status,
    valid_transitions,
)
from app.modules.quotes.models import LessonQuote
from app.modules.quotes.repository import QuotesRepository
from app.shared.exceptions import (
    BusinessRuleException,
    ConflictException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
)

logger = logging.getLogger(__name__)

LESSON_CREATABLE_QUOTE_STATUSES = frozenset({QuoteStatusEnum.CREATED, QuoteStatusEnum.ACCEPTED})


def lesson_participants(lesson: Lesson) -> Participants:
    return Participants(student_id=lesson.student_id, teacher_id=lesson.teacher_id)


class LessonsService:
    """Lessons domain service."""

    def __init__(
        self,
        repository: LessonsRepository,
        quotes_repository: QuotesRepository,
        transactions: TransactionManager,
        audit_repository: AuditRepository,
    ) -> None:
        self.repository = repository
        self.quotes_repository = quotes_repository
        self.transactions = transactions
        self.audit_repository = audit_repository

    async def materialize_lesson(
        self,
        quote: LessonQuote,
        quote_status: QuoteStatusEnum,
        context: Mapping[str, Any] | None = None,
    ) -> tuple[Lesson, list[UUID]]:
        """Create the lesson of ``quote``, accept the quote and expire its open siblings.

        Runs in the caller's unit of work, which must already hold the lesson
        request and quote row locks. ``lessons.quote_id`` is unique, so a
        concurrent insert for the same quote fails at flush time.
        """
        existing = await self.repository.get_lesson_by_quote_id(quote.id)
        if existing is not None:
            raise ConflictException("A lesson already exists for this quote")

        accepted_status = None
        if quote_status != QuoteStatusEnum.ACCEPTED:
            accepted_status = resulting_quote_status(quote_status, QuoteTransitionEnum.ACCEPT)
            if accepted_status is None:
                raise InvalidTransitionException(f"Cannot accept a quote that is {quote_status}")

        lesson = await self.repository.create_lesson(quote.id)
        await self.repository.append_status(lesson, LessonStatusEnum.REQUESTED, context)
        if accepted_status is not None:
            await self.quotes_repository.append_status(quote, accepted_status, context)
        expired = await self._expire_siblings(quote)
        return lesson, expired

    async def _expire_siblings(self, accepted: LessonQuote) -> list[UUID]:
        expired: list[UUID] = []
        siblings = await self.quotes_repository.list_quotes_for_request(accepted.lesson_request_id)
        for sibling in siblings:
            if sibling.id == accepted.id:
                continue
            if await self.repository.get_lesson_by_quote_id(sibling.id) is not None:
                raise ConflictException("Another quote of this lesson request already has a lesson")
            current = await self.quotes_repository.current_status(sibling.id)
            if is_terminal(QUOTE_TRANSITIONS, current.status):
                continue
            new_status = resulting_quote_status(current.status, QuoteTransitionEnum.EXPIRE)
            await self.quotes_repository.append_status(sibling, new_status, {"accepted_quote_id": str(accepted.id)})
            record_transition("lesson_quote", QuoteTransitionEnum.EXPIRE, "applied")
            expired.append(sibling.id)
        return expired

    async def create_lesson(self, quote_id: UUID, actor: User) -> Lesson:
        """Create a lesson straight from a quote on behalf of its student.

        The quote goes through the same acceptance as ``accept_quote``: it ends
        up ACCEPTED and every open sibling quote is expired.
        """
        if actor.role.name != RoleEnum.ADMIN:
            raise ForbiddenException("Only admin can create lessons directly")

        async with self.transactions.atomic():
            quote = await self.quotes_repository.get_quote_by_id(quote_id)
            if quote is None:
                raise NotFoundException("Lesson quote not found")

            await self.quotes_repository.lock_request(quote.lesson_request_id)
            quote = await self.quotes_repository.get_quote_for_update(quote_id)
            quote_status = await self.quotes_repository.current_status(quote.id)
            if quote_status.status not in LESSON_CREATABLE_QUOTE_STATUSES:
                raise InvalidTransitionException(
                    f"Cannot create a lesson from a quote that is {quote_status.status}",
                )

            lesson, expired = await self.materialize_lesson(
                quote,
                quote_status.status,
                {"created_by": str(actor.id)},
            )
            await self.audit_repository.create_audit_log(
                actor_id=actor.id,
                action="lesson.create",
                entity_type="lesson",
                entity_id=str(lesson.id),
                payload={
                    "quote_id": str(quote.id),
                    "expired_quote_ids": [str(sibling_id) for sibling_id in expired],
                },
            )

        if quote_status.status != QuoteStatusEnum.ACCEPTED:
            record_transition("lesson_quote", QuoteTransitionEnum.ACCEPT, "applied")
        logger.info("Admin %s created lesson %s from quote %s", actor.id, lesson.id, quote_id)
        return await self._reload(lesson.id)

    async def update_status(
        self,
        lesson_id: UUID,
        transition: LessonTransitionEnum,
        context: Mapping[str, Any] | None,
        actor: User,
    ) -> Lesson:
        """Apply ``transition`` to a lesson.

        The lesson row is locked before its current status is read, so two
        concurrent transitions of one lesson are evaluated one after another.
        """
        async with self.transactions.atomic():
            lesson = await self.repository.get_lesson_for_update(lesson_id)
            if lesson is None:
                raise NotFoundException("Lesson not found")

            current = await self.repository.current_status(lesson.id)

            if not can_transition_lesson(actor.id, actor.role.name, lesson_participants(lesson), transition):
                record_transition("lesson", transition, "forbidden")
                raise ForbiddenException("You are not allowed to change this lesson")

            new_status = resulting_lesson_status(current.status, transition)
            if new_status is None:
                record_transition("lesson", transition, "invalid")
                raise InvalidTransitionException(
                    f"Cannot {transition} a lesson that is {current.status}",
                )

            await self.repository.append_status(lesson, new_status, context)
            await self.audit_repository.create_audit_log(
                actor_id=actor.id,
                action=f"lesson.{transition.lower()}",
                entity_type="lesson",
                entity_id=str(lesson.id),
                payload={"from": current.status, "to": new_status},
            )

        record_transition("lesson", transition, "applied")
        logger.info("Lesson %s moved %s -> %s by %s", lesson_id, current.status, new_status, actor.id)
        return await self._reload(lesson_id)

    async def create_summary(self, lesson_id: UUID, payload: LessonSummaryCreate, actor: User) -> LessonSummary:
        """Store the one summary a completed lesson may have."""
        async with self.transactions.atomic():
            lesson = await self.repository.get_lesson_for_update(lesson_id)
            if lesson is None:
                raise NotFoundException("Lesson not found")
            if not can_summarize_lesson(actor.id, actor.role.name, lesson_participants(lesson)):
                raise ForbiddenException("Only the lesson's teacher can write its summary")

            current = await self.repository.current_status(lesson.id)
            if current.status != LessonStatusEnum.COMPLETED:
                raise BusinessRuleException("Lesson summary can only be written for a completed lesson")
            if await self.repository.get_summary_by_lesson_id(lesson.id) is not None:
                raise ConflictException("Lesson already has a summary")

            summary = await self.repository.create_summary(lesson.id, payload.summary, payload.homework)
            await self.audit_repository.create_audit_log(
                actor_id=actor.id,
                action="lesson.summarize",
                entity_type="lesson",
                entity_id=str(lesson.id),
                payload={"summary_id": str(summary.id)},
            )

        logger.info("Teacher %s summarized lesson %s", actor.id, lesson_id)
        return summary

    async def get_summary(self, lesson_id: UUID, actor: User) -> LessonSummary:
        lesson = await self._get_visible_lesson(lesson_id, actor)
        summary = await self.repository.get_summary_by_lesson_id(lesson.id)
        if summary is None:
            raise NotFoundException("Lesson summary not found")
        return summary

    async def get_lesson_for_quote(self, quote_id: UUID) -> Lesson | None:
        return await self.repository.get_lesson_by_quote_id(quote_id)

    async def _reload(self, lesson_id: UUID) -> Lesson:
        lesson = await self.repository.get_lesson_by_id(lesson_id)
        if lesson is None:
            raise NotFoundException("Lesson not found")
        return lesson

    async def _get_visible_lesson(self, lesson_id: UUID, actor: User) -> Lesson:
        lesson = await self._reload(lesson_id)
        if not can_view(actor.id, actor.role.name, lesson_participants(lesson)):
            raise ForbiddenException("You are not allowed to view this lesson")
        return lesson

    async def get_lesson(self, lesson_id: UUID, actor: User) -> Lesson:
        return await self._get_visible_lesson(lesson_id, actor)

    async def list_lessons(self, actor: User, limit: int, offset: int) -> tuple[list[Lesson], int]:
        """List lessons according to actor role."""
        return await self.repository.list_lessons_for_user(actor.id, actor.role.name, limit, offset)

    async def get_lesson_history(self, lesson_id: UUID, actor: User) -> list[LessonStatus]:
        """Status records of a lesson, oldest first."""
        lesson = await self._get_visible_lesson(lesson_id, actor)
        return await self.repository.history(lesson.id)

    async def get_available_transitions(self, lesson_id: UUID, actor: User) -> LessonTransitionsRead:
        """Transitions legal from the current status that ``actor`` may apply."""
        lesson = await self._get_visible_lesson(lesson_id, actor)
        current = await self.repository.current_status(lesson.id)
        participants = lesson_participants(lesson)

        transitions = [
            AvailableTransition(
                transition=transition,
                label=display_label(transition),
                resulting_status=LESSON_TRANSITIONS[current.status][transition],
            )
            for transition in valid_transitions(LESSON_TRANSITIONS, current.status)
            if can_transition_lesson(actor.id, actor.role.name, participants, transition)
        ]
        return LessonTransitionsRead(
            lesson_id=lesson.id,
            current_status=current.status,
            is_terminal=is_terminal(LESSON_TRANSITIONS, current.status),
            transitions=transitions,
        )


def build_lessons_service(session: AsyncSession) -> LessonsService:
    return LessonsService(
        repository=LessonsRepository(session),
        quotes_repository=QuotesRepository(session),
        transactions=TransactionManager(session),
        audit_repository=AuditRepository(session),
    )


async def get_lessons_service(session: AsyncSession = Depends(get_db_session)) -> LessonsService:
    """Dependency provider for lessons service."""
    return build_lessons_service(session)
