"""Teachers repository layer."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enums import LessonTypeEnum, RateStatusEnum
from app.modules.identity.models import User
from app.modules.lifecycle.ledger import StatusLedger
from app.modules.teachers.models import (
    TeacherLessonHourlyRate,
    TeacherLessonHourlyRateStatus,
    TeacherProfile,
)
from app.modules.teachers.schemas import EligibleTeacher


class TeachersRepository:
    """DB operations for teachers domain and the teacher directory."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.rate_ledger = StatusLedger(
            session,
            TeacherLessonHourlyRate,
            TeacherLessonHourlyRateStatus,
            owner_field="rate_id",
            label="Hourly rate",
        )

    async def create_profile(
        self,
        user_id: UUID,
        display_name: str,
        bio: str,
        experience_years: int,
    ) -> TeacherProfile:
        profile = TeacherProfile(
            user_id=user_id,
            display_name=display_name,
            bio=bio,
            experience_years=experience_years,
        )
        self.session.add(profile)
        await self.session.flush()
        return profile

    async def get_profile_by_user_id(self, user_id: UUID) -> TeacherProfile | None:
        stmt = select(TeacherProfile).where(TeacherProfile.user_id == user_id)
        return await self.session.scalar(stmt)

    async def update_profile(self, profile: TeacherProfile, **changes) -> TeacherProfile:
        for key, value in changes.items():
            if value is not None:
                setattr(profile, key, value)
        await self.session.flush()
        return profile

    async def lock_teacher(self, teacher_id: UUID) -> None:
        """Serialize rate changes of one teacher behind the user row lock."""
        stmt = select(User.id).where(User.id == teacher_id).with_for_update()
        await self.session.execute(stmt)

    async def get_rate_by_id(self, rate_id: UUID) -> TeacherLessonHourlyRate | None:
        stmt = (
            select(TeacherLessonHourlyRate)
            .options(selectinload(TeacherLessonHourlyRate.current_status))
            .where(TeacherLessonHourlyRate.id == rate_id)
        )
        return await self.session.scalar(stmt)

    async def get_rate_for_type(
        self,
        teacher_id: UUID,
        lesson_type: LessonTypeEnum,
    ) -> TeacherLessonHourlyRate | None:
        stmt = select(TeacherLessonHourlyRate).where(
            TeacherLessonHourlyRate.teacher_id == teacher_id,
            TeacherLessonHourlyRate.lesson_type == lesson_type,
        )
        return await self.session.scalar(stmt)

    async def find_other_active_rate(
        self,
        teacher_id: UUID,
        lesson_type: LessonTypeEnum,
        exclude_rate_id: UUID,
    ) -> TeacherLessonHourlyRate | None:
        stmt = (
            select(TeacherLessonHourlyRate)
            .join(
                TeacherLessonHourlyRateStatus,
                TeacherLessonHourlyRateStatus.id == TeacherLessonHourlyRate.current_status_id,
            )
            .where(
                TeacherLessonHourlyRate.teacher_id == teacher_id,
                TeacherLessonHourlyRate.lesson_type == lesson_type,
                TeacherLessonHourlyRate.id != exclude_rate_id,
                TeacherLessonHourlyRateStatus.status == RateStatusEnum.ACTIVE,
            )
        )
        return await self.session.scalar(stmt)

    async def create_rate(
        self,
        teacher_id: UUID,
        lesson_type: LessonTypeEnum,
        rate_in_cents: int,
    ) -> TeacherLessonHourlyRate:
        rate = TeacherLessonHourlyRate(
            teacher_id=teacher_id,
            lesson_type=lesson_type,
            rate_in_cents=rate_in_cents,
        )
        self.session.add(rate)
        await self.session.flush()
        return rate

    async def append_rate_status(
        self,
        rate: TeacherLessonHourlyRate,
        status: RateStatusEnum,
        context: Mapping[str, Any] | None = None,
    ) -> TeacherLessonHourlyRateStatus:
        return await self.rate_ledger.append_status(rate, status, context)

    async def current_rate_status(self, rate_id: UUID) -> TeacherLessonHourlyRateStatus:
        return await self.rate_ledger.current_status(rate_id)

    async def list_rates_for_teacher(self, teacher_id: UUID) -> list[TeacherLessonHourlyRate]:
        stmt = (
            select(TeacherLessonHourlyRate)
            .options(selectinload(TeacherLessonHourlyRate.current_status))
            .where(TeacherLessonHourlyRate.teacher_id == teacher_id)
            .order_by(TeacherLessonHourlyRate.lesson_type.asc())
        )
        return list((await self.session.scalars(stmt)).all())

    async def find_eligible_teachers(
        self,
        lesson_type: LessonTypeEnum,
        limit: int,
    ) -> list[EligibleTeacher]:
        active_teacher_ids = (
            select(TeacherLessonHourlyRate.teacher_id)
            .join(
                TeacherLessonHourlyRateStatus,
                TeacherLessonHourlyRateStatus.id == TeacherLessonHourlyRate.current_status_id,
            )
            .where(
                TeacherLessonHourlyRate.lesson_type == lesson_type,
                TeacherLessonHourlyRateStatus.status == RateStatusEnum.ACTIVE,
            )
        )
        stmt = (
            select(TeacherProfile)
            .options(
                selectinload(TeacherProfile.hourly_rates).selectinload(TeacherLessonHourlyRate.current_status),
            )
            .where(TeacherProfile.user_id.in_(active_teacher_ids))
            .order_by(TeacherProfile.experience_years.desc(), TeacherProfile.created_at.asc())
            .limit(limit)
        )
        profiles = (await self.session.scalars(stmt)).all()
        return [
            EligibleTeacher(
                teacher_id=profile.user_id,
                display_name=profile.display_name,
                active_rates={
                    rate.lesson_type: rate.rate_in_cents
                    for rate in profile.hourly_rates
                    if rate.current_status is not None and rate.current_status.status == RateStatusEnum.ACTIVE
                },
            )
            for profile in profiles
        ]
