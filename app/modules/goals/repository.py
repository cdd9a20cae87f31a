"""Goals repository layer."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enums import GoalStatusEnum
from app.modules.goals.models import Goal, GoalStatus
from app.modules.lessons.models import Lesson
from app.modules.lifecycle.ledger import StatusLedger
from app.modules.quotes.models import LessonQuote


class GoalsRepository:
    """DB operations for lesson goals and their status ledger."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.ledger = StatusLedger(
            session,
            Goal,
            GoalStatus,
            owner_field="goal_id",
            label="Goal",
        )

    @staticmethod
    def _with_relations(stmt):
        return stmt.execution_options(populate_existing=True).options(
            selectinload(Goal.lesson).selectinload(Lesson.quote).selectinload(LessonQuote.lesson_request),
            selectinload(Goal.current_status),
        )

    async def create_goal(
        self,
        lesson_id: UUID,
        title: str,
        description: str,
        estimated_lesson_count: int,
    ) -> Goal:
        goal = Goal(
            lesson_id=lesson_id,
            title=title,
            description=description,
            estimated_lesson_count=estimated_lesson_count,
        )
        self.session.add(goal)
        await self.session.flush()
        return goal

    async def get_goal_by_id(self, goal_id: UUID) -> Goal | None:
        stmt = self._with_relations(select(Goal).where(Goal.id == goal_id))
        return await self.session.scalar(stmt)

    async def get_goal_for_update(self, goal_id: UUID) -> Goal | None:
        stmt = self._with_relations(select(Goal).where(Goal.id == goal_id).with_for_update(of=Goal))
        return await self.session.scalar(stmt)

    async def list_goals_for_lesson(self, lesson_id: UUID) -> list[Goal]:
        stmt = self._with_relations(
            select(Goal).where(Goal.lesson_id == lesson_id).order_by(Goal.created_at.asc(), Goal.id.asc()),
        )
        return list((await self.session.scalars(stmt)).all())

    async def append_status(
        self,
        goal: Goal,
        status: GoalStatusEnum,
        context: Mapping[str, Any] | None = None,
    ) -> GoalStatus:
        return await self.ledger.append_status(goal, status, context)

    async def current_status(self, goal_id: UUID) -> GoalStatus:
        return await self.ledger.current_status(goal_id)

    async def history(self, goal_id: UUID) -> list[GoalStatus]:
        return await self.ledger.history(goal_id)
