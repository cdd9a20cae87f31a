"""Lesson request repository layer."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import LessonTypeEnum
from app.modules.lesson_requests.models import LessonRequest


class LessonRequestsRepository:
    """DB operations for lesson requests."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_request(
        self,
        student_id: UUID,
        lesson_type: LessonTypeEnum,
        start_at: datetime,
        duration_minutes: int,
        address: str,
    ) -> LessonRequest:
        request = LessonRequest(
            student_id=student_id,
            lesson_type=lesson_type,
            start_at=start_at,
            duration_minutes=duration_minutes,
            address=address,
        )
        self.session.add(request)
        await self.session.flush()
        return request

    async def get_request_by_id(self, request_id: UUID) -> LessonRequest | None:
        stmt = select(LessonRequest).where(LessonRequest.id == request_id)
        return await self.session.scalar(stmt)

    async def list_requests_for_student(
        self,
        student_id: UUID,
        limit: int,
        offset: int,
    ) -> tuple[list[LessonRequest], int]:
        base_stmt: Select[tuple[LessonRequest]] = select(LessonRequest).where(
            LessonRequest.student_id == student_id,
        )
        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(LessonRequest.created_at.desc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return items, total
