"""Lessons repository layer."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enums import LessonStatusEnum, RoleEnum
from app.modules.lesson_requests.models import LessonRequest
from app.modules.lessons.models import Lesson, LessonStatus, LessonSummary
from app.modules.lifecycle.ledger import StatusLedger
from app.modules.quotes.models import LessonQuote


class LessonsRepository:
    """DB operations for lessons domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.ledger = StatusLedger(
            session,
            Lesson,
            LessonStatus,
            owner_field="lesson_id",
            label="Lesson",
        )

    @staticmethod
    def _with_relations(stmt):
        return stmt.execution_options(populate_existing=True).options(
            selectinload(Lesson.quote).selectinload(LessonQuote.lesson_request),
            selectinload(Lesson.quote).selectinload(LessonQuote.current_status),
            selectinload(Lesson.current_status),
        )

    async def create_lesson(self, quote_id: UUID) -> Lesson:
        lesson = Lesson(quote_id=quote_id)
        self.session.add(lesson)
        await self.session.flush()
        return lesson

    async def get_lesson_by_id(self, lesson_id: UUID) -> Lesson | None:
        stmt = self._with_relations(select(Lesson).where(Lesson.id == lesson_id))
        return await self.session.scalar(stmt)

    async def get_lesson_for_update(self, lesson_id: UUID) -> Lesson | None:
        stmt = self._with_relations(select(Lesson).where(Lesson.id == lesson_id).with_for_update(of=Lesson))
        return await self.session.scalar(stmt)

    async def get_lesson_by_quote_id(self, quote_id: UUID) -> Lesson | None:
        stmt = select(Lesson).where(Lesson.quote_id == quote_id)
        return await self.session.scalar(stmt)

    async def list_lessons_for_user(
        self,
        user_id: UUID,
        role_name: RoleEnum,
        limit: int,
        offset: int,
    ) -> tuple[list[Lesson], int]:
        base_stmt: Select[tuple[Lesson]] = (
            select(Lesson)
            .join(LessonQuote, LessonQuote.id == Lesson.quote_id)
            .join(LessonRequest, LessonRequest.id == LessonQuote.lesson_request_id)
        )

        if role_name == RoleEnum.STUDENT:
            base_stmt = base_stmt.where(LessonRequest.student_id == user_id)
        elif role_name == RoleEnum.TEACHER:
            base_stmt = base_stmt.where(LessonQuote.teacher_id == user_id)

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = self._with_relations(
            base_stmt.order_by(LessonRequest.start_at.asc(), Lesson.created_at.asc()).limit(limit).offset(offset),
        )
        items = (await self.session.scalars(stmt)).all()
        return items, total

    async def append_status(
        self,
        lesson: Lesson,
        status: LessonStatusEnum,
        context: Mapping[str, Any] | None = None,
    ) -> LessonStatus:
        return await self.ledger.append_status(lesson, status, context)

    async def current_status(self, lesson_id: UUID) -> LessonStatus:
        return await self.ledger.current_status(lesson_id)

    async def history(self, lesson_id: UUID) -> list[LessonStatus]:
        return await self.ledger.history(lesson_id)

    async def create_summary(self, lesson_id: UUID, summary: str, homework: str) -> LessonSummary:
        lesson_summary = LessonSummary(lesson_id=lesson_id, summary=summary, homework=homework)
        self.session.add(lesson_summary)
        await self.session.flush()
        return lesson_summary

    async def get_summary_by_lesson_id(self, lesson_id: UUID) -> LessonSummary | None:
        stmt = select(LessonSummary).where(LessonSummary.lesson_id == lesson_id)
        return await self.session.scalar(stmt)
