"""Learning goals attached to lessons, tracked through their own status ledger."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import TransactionManager, get_db_session
from app.core.enums import GoalStatusEnum, GoalTransitionEnum, LessonStatusEnum
from app.core.metrics import record_transition
from app.modules.audit.repository import AuditRepository
from app.modules.goals.models import Goal, GoalStatus
from app.modules.goals.repository import GoalsRepository
from app.modules.goals.schemas import GoalCreate
from app.modules.identity.models import User
from app.modules.lessons.models import Lesson
from app.modules.lessons.repository import LessonsRepository
from app.modules.lifecycle.guard import Participants, can_manage_goal, can_view
from app.modules.lifecycle.transitions import resulting_goal_status
from app.shared.exceptions import (
    BusinessRuleException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
)

logger = logging.getLogger(__name__)

# lessons that will never take place get no goals
GOAL_CLOSED_LESSON_STATUSES = frozenset({LessonStatusEnum.REJECTED, LessonStatusEnum.VOIDED})


def goal_participants(goal: Goal) -> Participants:
    return Participants(student_id=goal.student_id, teacher_id=goal.teacher_id)


def _lesson_participants(lesson: Lesson) -> Participants:
    return Participants(student_id=lesson.student_id, teacher_id=lesson.teacher_id)


class GoalsService:
    """Goals domain service."""

    def __init__(
        self,
        repository: GoalsRepository,
        lessons_repository: LessonsRepository,
        transactions: TransactionManager,
        audit_repository: AuditRepository,
    ) -> None:
        self.repository = repository
        self.lessons_repository = lessons_repository
        self.transactions = transactions
        self.audit_repository = audit_repository

    async def create_goal(self, payload: GoalCreate, actor: User) -> Goal:
        """Create a goal in CREATED status for one of the teacher's lessons."""
        async with self.transactions.atomic():
            lesson = await self.lessons_repository.get_lesson_for_update(payload.lesson_id)
            if lesson is None:
                raise NotFoundException("Lesson not found")
            if not can_manage_goal(actor.id, actor.role.name, _lesson_participants(lesson)):
                raise ForbiddenException("Only the lesson's teacher can set goals")

            lesson_status = await self.lessons_repository.current_status(lesson.id)
            if lesson_status.status in GOAL_CLOSED_LESSON_STATUSES:
                raise BusinessRuleException(f"Cannot set goals for a lesson that is {lesson_status.status}")

            goal = await self.repository.create_goal(
                lesson_id=lesson.id,
                title=payload.title,
                description=payload.description,
                estimated_lesson_count=payload.estimated_lesson_count,
            )
            await self.repository.append_status(goal, GoalStatusEnum.CREATED)
            await self.audit_repository.create_audit_log(
                actor_id=actor.id,
                action="goal.create",
                entity_type="goal",
                entity_id=str(goal.id),
                payload={"lesson_id": str(lesson.id)},
            )

        logger.info("Teacher %s set goal %s for lesson %s", actor.id, goal.id, lesson.id)
        return await self._reload(goal.id)

    async def update_status(
        self,
        goal_id: UUID,
        transition: GoalTransitionEnum,
        context: Mapping[str, Any] | None,
        actor: User,
    ) -> Goal:
        """Apply ``transition`` to a goal under its row lock."""
        async with self.transactions.atomic():
            goal = await self.repository.get_goal_for_update(goal_id)
            if goal is None:
                raise NotFoundException("Goal not found")

            current = await self.repository.current_status(goal.id)

            if not can_manage_goal(actor.id, actor.role.name, goal_participants(goal), transition):
                record_transition("goal", transition, "forbidden")
                raise ForbiddenException("You are not allowed to change this goal")

            new_status = resulting_goal_status(current.status, transition)
            if new_status is None:
                record_transition("goal", transition, "invalid")
                raise InvalidTransitionException(f"Cannot {transition} a goal that is {current.status}")

            await self.repository.append_status(goal, new_status, context)
            await self.audit_repository.create_audit_log(
                actor_id=actor.id,
                action=f"goal.{transition.lower()}",
                entity_type="goal",
                entity_id=str(goal.id),
                payload={"from": current.status, "to": new_status},
            )

        record_transition("goal", transition, "applied")
        logger.info("Goal %s moved %s -> %s by %s", goal_id, current.status, new_status, actor.id)
        return await self._reload(goal_id)

    async def _reload(self, goal_id: UUID) -> Goal:
        goal = await self.repository.get_goal_by_id(goal_id)
        if goal is None:
            raise NotFoundException("Goal not found")
        return goal

    async def get_goal(self, goal_id: UUID, actor: User) -> Goal:
        goal = await self._reload(goal_id)
        if not can_view(actor.id, actor.role.name, goal_participants(goal)):
            raise ForbiddenException("You are not allowed to view this goal")
        return goal

    async def list_goals_for_lesson(self, lesson_id: UUID, actor: User) -> list[Goal]:
        lesson = await self.lessons_repository.get_lesson_by_id(lesson_id)
        if lesson is None:
            raise NotFoundException("Lesson not found")
        if not can_view(actor.id, actor.role.name, _lesson_participants(lesson)):
            raise ForbiddenException("You are not allowed to view this lesson")
        return await self.repository.list_goals_for_lesson(lesson.id)

    async def get_goal_history(self, goal_id: UUID, actor: User) -> list[GoalStatus]:
        goal = await self.get_goal(goal_id, actor)
        return await self.repository.history(goal.id)


async def get_goals_service(session: AsyncSession = Depends(get_db_session)) -> GoalsService:
    """Dependency provider for goals service."""
    return GoalsService(
        repository=GoalsRepository(session),
        lessons_repository=LessonsRepository(session),
        transactions=TransactionManager(session),
        audit_repository=AuditRepository(session),
    )
