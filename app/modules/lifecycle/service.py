"""Current status lookup across ledger-tracked entities."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import EntityKindEnum
from app.modules.goals.repository import GoalsRepository
from app.modules.identity.models import User
from app.modules.lessons.repository import LessonsRepository
from app.modules.lifecycle.guard import Participants, can_view
from app.modules.lifecycle.schemas import CurrentStatusRead
from app.modules.quotes.repository import QuotesRepository
from app.shared.exceptions import ForbiddenException, NotFoundException


class LifecycleService:
    """Read-only access to the current status of any tracked entity."""

    def __init__(
        self,
        lessons_repository: LessonsRepository,
        quotes_repository: QuotesRepository,
        goals_repository: GoalsRepository,
    ) -> None:
        self.lessons_repository = lessons_repository
        self.quotes_repository = quotes_repository
        self.goals_repository = goals_repository

    def _repository_for(self, entity_kind: EntityKindEnum):
        if entity_kind == EntityKindEnum.LESSON:
            return self.lessons_repository, self.lessons_repository.get_lesson_by_id, "Lesson"
        if entity_kind == EntityKindEnum.LESSON_QUOTE:
            return self.quotes_repository, self.quotes_repository.get_quote_by_id, "Lesson quote"
        return self.goals_repository, self.goals_repository.get_goal_by_id, "Goal"

    async def get_current_status(
        self,
        entity_id: UUID,
        entity_kind: EntityKindEnum,
        actor: User,
    ) -> CurrentStatusRead:
        """Status the entity's pointer refers to; participants and admins only."""
        repository, load, label = self._repository_for(entity_kind)
        entity = await load(entity_id)
        if entity is None:
            raise NotFoundException(f"{label} not found")
        participants = Participants(student_id=entity.student_id, teacher_id=entity.teacher_id)
        if not can_view(actor.id, actor.role.name, participants):
            raise ForbiddenException(f"You are not allowed to view this {label.lower()}")

        record = await repository.current_status(entity_id)
        return CurrentStatusRead(
            entity_kind=entity_kind,
            entity_id=entity_id,
            status=record.status,
            status_id=record.id,
        )


async def get_lifecycle_service(session: AsyncSession = Depends(get_db_session)) -> LifecycleService:
    """Dependency provider for lifecycle service."""
    return LifecycleService(LessonsRepository(session), QuotesRepository(session), GoalsRepository(session))
