"""Teachers business logic layer: profiles and hourly rates."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import TransactionManager, get_db_session
from app.core.enums import RateStatusEnum, RateTransitionEnum, RoleEnum
from app.modules.audit.repository import AuditRepository
from app.modules.identity.models import User
from app.modules.lifecycle.transitions import resulting_rate_status
from app.modules.teachers.models import TeacherLessonHourlyRate, TeacherProfile
from app.modules.teachers.repository import TeachersRepository
from app.modules.teachers.schemas import (
    HourlyRateCreate,
    HourlyRateTransitionRequest,
    TeacherProfileUpsert,
)
from app.shared.exceptions import (
    ConflictException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
)

logger = logging.getLogger(__name__)


class TeachersService:
    """Teachers domain service."""

    def __init__(
        self,
        repository: TeachersRepository,
        transactions: TransactionManager,
        audit_repository: AuditRepository,
    ) -> None:
        self.repository = repository
        self.transactions = transactions
        self.audit_repository = audit_repository

    @staticmethod
    def _require_teacher(actor: User) -> None:
        if actor.role.name != RoleEnum.TEACHER:
            raise ForbiddenException("Only teachers can manage profiles and rates")

    async def upsert_profile(self, payload: TeacherProfileUpsert, actor: User) -> TeacherProfile:
        """Create the acting teacher's profile or update it in place."""
        self._require_teacher(actor)

        profile = await self.repository.get_profile_by_user_id(actor.id)
        if profile is None:
            return await self.repository.create_profile(
                user_id=actor.id,
                display_name=payload.display_name,
                bio=payload.bio,
                experience_years=payload.experience_years,
            )
        return await self.repository.update_profile(profile, **payload.model_dump())

    async def create_rate(self, payload: HourlyRateCreate, actor: User) -> TeacherLessonHourlyRate:
        """Create an ACTIVE hourly rate; one rate row per lesson type."""
        self._require_teacher(actor)

        async with self.transactions.atomic():
            await self.repository.lock_teacher(actor.id)

            existing = await self.repository.get_rate_for_type(actor.id, payload.lesson_type)
            if existing is not None:
                raise ConflictException(
                    f"A rate for lesson type {payload.lesson_type} already exists; "
                    "activate or deactivate it instead",
                )

            rate = await self.repository.create_rate(
                teacher_id=actor.id,
                lesson_type=payload.lesson_type,
                rate_in_cents=payload.rate_in_cents,
            )
            await self.repository.append_rate_status(rate, RateStatusEnum.ACTIVE)

        logger.info("Teacher %s created %s rate %s", actor.id, payload.lesson_type, rate.id)
        return rate

    async def transition_rate(
        self,
        rate_id: UUID,
        payload: HourlyRateTransitionRequest,
        actor: User,
    ) -> TeacherLessonHourlyRate:
        """Activate or deactivate an owned rate, keeping one active rate per lesson type."""
        self._require_teacher(actor)

        async with self.transactions.atomic():
            await self.repository.lock_teacher(actor.id)

            rate = await self.repository.get_rate_by_id(rate_id)
            if rate is None or rate.teacher_id != actor.id:
                raise NotFoundException("Hourly rate not found")

            current = await self.repository.current_rate_status(rate.id)
            new_status = resulting_rate_status(current.status, payload.transition)
            if new_status is None:
                raise InvalidTransitionException(
                    f"Cannot {payload.transition} a rate that is {current.status}",
                )

            if payload.transition == RateTransitionEnum.ACTIVATE:
                other = await self.repository.find_other_active_rate(actor.id, rate.lesson_type, rate.id)
                if other is not None:
                    raise ConflictException(f"An active rate for {rate.lesson_type} already exists")

            await self.repository.append_rate_status(rate, new_status, payload.context)
            await self.audit_repository.create_audit_log(
                actor_id=actor.id,
                action=f"hourly_rate.{payload.transition.lower()}",
                entity_type="hourly_rate",
                entity_id=str(rate.id),
                payload={"from": current.status, "to": new_status},
            )

        return rate

    async def list_my_rates(self, actor: User) -> list[TeacherLessonHourlyRate]:
        """List the acting teacher's rates with their current status."""
        self._require_teacher(actor)
        return await self.repository.list_rates_for_teacher(actor.id)


async def get_teachers_service(session: AsyncSession = Depends(get_db_session)) -> TeachersService:
    """Dependency provider for teachers service."""
    return TeachersService(
        repository=TeachersRepository(session),
        transactions=TransactionManager(session),
        audit_repository=AuditRepository(session),
    )
