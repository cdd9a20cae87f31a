"""Lesson request intake."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.database import TransactionManager, get_db_session, utc_now
from app.core.enums import RoleEnum
from app.modules.identity.models import User
from app.modules.lesson_requests.models import LessonRequest
from app.modules.lesson_requests.repository import LessonRequestsRepository
from app.modules.lesson_requests.schemas import LessonRequestCreate
from app.modules.quotes.models import LessonQuote
from app.modules.quotes.service import QuotesService, build_quotes_service
from app.shared.exceptions import BusinessRuleException, ForbiddenException, NotFoundException

logger = logging.getLogger(__name__)


class LessonRequestsService:
    """Lesson requests domain service."""

    def __init__(
        self,
        repository: LessonRequestsRepository,
        quotes_service: QuotesService,
        transactions: TransactionManager,
        settings: Settings,
    ) -> None:
        self.repository = repository
        self.quotes_service = quotes_service
        self.transactions = transactions
        self.settings = settings

    async def submit_request(
        self,
        payload: LessonRequestCreate,
        actor: User,
    ) -> tuple[LessonRequest, list[LessonQuote]]:
        """Store a student's lesson request and quote eligible teachers for it."""
        if actor.role.name != RoleEnum.STUDENT:
            raise ForbiddenException("Only students can request lessons")

        if payload.start_at <= utc_now():
            raise BusinessRuleException("Lesson start must be in the future")

        min_duration = self.settings.lesson_min_duration_minutes
        max_duration = self.settings.lesson_max_duration_minutes
        if not min_duration <= payload.duration_minutes <= max_duration:
            raise BusinessRuleException(
                f"Lesson duration must be between {min_duration} and {max_duration} minutes",
            )

        async with self.transactions.atomic():
            request = await self.repository.create_request(
                student_id=actor.id,
                lesson_type=payload.lesson_type,
                start_at=payload.start_at,
                duration_minutes=payload.duration_minutes,
                address=payload.address,
            )

        quotes = await self.quotes_service.create_quotes_for_request(request)
        logger.info("Student %s submitted request %s, %s quotes", actor.id, request.id, len(quotes))
        return request, quotes

    async def get_request(self, request_id: UUID, actor: User) -> LessonRequest:
        """Owner and admin see any request; a teacher sees requests they were quoted for."""
        request = await self.repository.get_request_by_id(request_id)
        if request is None:
            raise NotFoundException("Lesson request not found")

        if actor.role.name == RoleEnum.ADMIN or request.student_id == actor.id:
            return request
        if actor.role.name == RoleEnum.TEACHER:
            quotes = await self.quotes_service.list_quotes_for_request(request, actor)
            if quotes:
                return request
        raise ForbiddenException("You are not allowed to view this lesson request")

    async def list_request_quotes(self, request_id: UUID, actor: User) -> list[LessonQuote]:
        request = await self.get_request(request_id, actor)
        return await self.quotes_service.list_quotes_for_request(request, actor)

    async def list_my_requests(self, actor: User, limit: int, offset: int) -> tuple[list[LessonRequest], int]:
        if actor.role.name != RoleEnum.STUDENT:
            raise ForbiddenException("Only students have lesson requests")
        return await self.repository.list_requests_for_student(actor.id, limit, offset)


async def get_lesson_requests_service(
    session: AsyncSession = Depends(get_db_session),
) -> LessonRequestsService:
    """Dependency provider for lesson requests service."""
    return LessonRequestsService(
        repository=LessonRequestsRepository(session),
        quotes_service=build_quotes_service(session),
        transactions=TransactionManager(session),
        settings=get_settings(),
    )
