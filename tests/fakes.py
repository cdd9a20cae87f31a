"""In-memory doubles for the lesson/quote lifecycle services.

Row locks are ``asyncio.Lock`` objects held until the outermost unit of work
ends; every write registers an undo step so a failed unit leaves no trace.
Reads yield to the event loop so concurrent calls really interleave.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Callable, Mapping
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from typing import Any
from uuid import UUID, uuid4

from app.core.enums import GoalStatusEnum, LessonStatusEnum, LessonTypeEnum, QuoteStatusEnum, RoleEnum
from app.modules.teachers.schemas import EligibleTeacher
from app.shared.exceptions import ConflictException, InconsistentStateError, NotFoundException

_BASE_TIME = datetime(2026, 1, 1, tzinfo=UTC)
_clock = itertools.count()


def _tick() -> datetime:
    return _BASE_TIME + timedelta(microseconds=next(_clock))


def make_actor(user_id: UUID, role: RoleEnum) -> SimpleNamespace:
    return SimpleNamespace(id=user_id, role=SimpleNamespace(name=role))


@dataclass
class FakeStatusRecord:
    id: UUID
    owner_id: UUID
    status: str
    context: dict
    created_at: datetime


@dataclass
class FakeLessonRequest:
    id: UUID
    student_id: UUID
    lesson_type: LessonTypeEnum
    start_at: datetime
    duration_minutes: int
    address: str
    created_at: datetime = field(default_factory=_tick)
    updated_at: datetime = field(default_factory=_tick)


@dataclass
class FakeQuote:
    id: UUID
    lesson_request_id: UUID
    lesson_request: FakeLessonRequest
    teacher_id: UUID
    hourly_rate_in_cents: int
    cost_in_cents: int
    current_status_id: UUID | None = None
    current_status: FakeStatusRecord | None = None
    created_at: datetime = field(default_factory=_tick)

    @property
    def student_id(self) -> UUID:
        return self.lesson_request.student_id


@dataclass
class FakeLesson:
    id: UUID
    quote_id: UUID
    quote: FakeQuote
    current_status_id: UUID | None = None
    current_status: FakeStatusRecord | None = None
    created_at: datetime = field(default_factory=_tick)

    @property
    def student_id(self) -> UUID:
        return self.quote.lesson_request.student_id

    @property
    def teacher_id(self) -> UUID:
        return self.quote.teacher_id


@dataclass
class FakeGoal:
    id: UUID
    lesson_id: UUID
    lesson: FakeLesson
    title: str
    description: str
    estimated_lesson_count: int
    current_status_id: UUID | None = None
    current_status: FakeStatusRecord | None = None
    created_at: datetime = field(default_factory=_tick)

    @property
    def student_id(self) -> UUID:
        return self.lesson.student_id

    @property
    def teacher_id(self) -> UUID:
        return self.lesson.teacher_id


@dataclass
class FakeLessonSummary:
    id: UUID
    lesson_id: UUID
    summary: str
    homework: str
    created_at: datetime = field(default_factory=_tick)


class _Unit:
    def __init__(self, parent: _Unit | None = None) -> None:
        self.root: _Unit = parent.root if parent is not None else self
        self.undo: list[Callable[[], None]] = []
        self.locks: dict[tuple[str, UUID], asyncio.Lock] = {}

    def rollback(self) -> None:
        while self.undo:
            self.undo.pop()()

    def release(self) -> None:
        for lock in self.locks.values():
            lock.release()
        self.locks.clear()


_current_unit: ContextVar[_Unit | None] = ContextVar("fake_unit", default=None)


class FakeStore:
    """Shared tables of the fake persistence layer."""

    def __init__(self) -> None:
        self.requests: dict[UUID, FakeLessonRequest] = {}
        self.quotes: dict[UUID, FakeQuote] = {}
        self.lessons: dict[UUID, FakeLesson] = {}
        self.quote_statuses: dict[UUID, FakeStatusRecord] = {}
        self.lesson_statuses: dict[UUID, FakeStatusRecord] = {}
        self.lesson_summaries: dict[UUID, FakeLessonSummary] = {}
        self.goals: dict[UUID, FakeGoal] = {}
        self.goal_statuses: dict[UUID, FakeStatusRecord] = {}
        self.teachers: list[EligibleTeacher] = []
        self._row_locks: dict[tuple[str, UUID], asyncio.Lock] = {}

    def on_rollback(self, undo: Callable[[], None]) -> None:
        unit = _current_unit.get()
        if unit is not None:
            unit.undo.append(undo)

    def insert(self, table: dict[UUID, Any], row: Any) -> None:
        table[row.id] = row
        self.on_rollback(lambda: table.pop(row.id, None))

    async def lock_row(self, kind: str, row_id: UUID) -> None:
        unit = _current_unit.get()
        if unit is None:
            raise RuntimeError("Row locks require an open unit of work")
        key = (kind, row_id)
        if key in unit.root.locks:
            return
        lock = self._row_locks.setdefault(key, asyncio.Lock())
        await lock.acquire()
        unit.root.locks[key] = lock

    def add_request(
        self,
        student_id: UUID,
        lesson_type: LessonTypeEnum = LessonTypeEnum.GUITAR,
        duration_minutes: int = 60,
    ) -> FakeLessonRequest:
        request = FakeLessonRequest(
            id=uuid4(),
            student_id=student_id,
            lesson_type=lesson_type,
            start_at=datetime.now(UTC) + timedelta(days=3),
            duration_minutes=duration_minutes,
            address="1 Music Lane",
        )
        self.requests[request.id] = request
        return request

    def add_teacher(
        self,
        rates: Mapping[LessonTypeEnum, int],
        display_name: str = "Teacher",
    ) -> EligibleTeacher:
        teacher = EligibleTeacher(teacher_id=uuid4(), display_name=display_name, active_rates=dict(rates))
        self.teachers.append(teacher)
        return teacher

    def quotes_for_request(self, request_id: UUID) -> list[FakeQuote]:
        return sorted(
            (quote for quote in self.quotes.values() if quote.lesson_request_id == request_id),
            key=lambda quote: quote.created_at,
        )

    def lesson_for_quote(self, quote_id: UUID) -> FakeLesson | None:
        return next((lesson for lesson in self.lessons.values() if lesson.quote_id == quote_id), None)


class FakeTransactionManager:
    """Savepoint semantics: nested units hand undo steps to the parent; locks belong to the outermost unit."""

    def __init__(self, store: FakeStore) -> None:
        self.store = store

    @asynccontextmanager
    async def atomic(self):
        parent = _current_unit.get()
        unit = _Unit(parent)
        token = _current_unit.set(unit)
        try:
            yield
        except BaseException:
            unit.rollback()
            raise
        else:
            if parent is not None:
                parent.undo.extend(unit.undo)
        finally:
            _current_unit.reset(token)
            if parent is None:
                unit.release()


class FakeLedger:
    def __init__(
        self,
        store: FakeStore,
        entities: dict[UUID, Any],
        records: dict[UUID, FakeStatusRecord],
        label: str,
    ) -> None:
        self.store = store
        self.entities = entities
        self.records = records
        self.label = label

    async def append_status(self, entity: Any, status: str, context: Mapping[str, Any] | None = None):
        record = FakeStatusRecord(
            id=uuid4(),
            owner_id=entity.id,
            status=status,
            context=dict(context or {}),
            created_at=_tick(),
        )
        self.store.insert(self.records, record)

        previous = (entity.current_status_id, entity.current_status)

        def _restore() -> None:
            entity.current_status_id, entity.current_status = previous

        entity.current_status_id = record.id
        entity.current_status = record
        self.store.on_rollback(_restore)
        return record

    async def current_status(self, entity_id: UUID) -> FakeStatusRecord:
        await asyncio.sleep(0)
        entity = self.entities.get(entity_id)
        if entity is None:
            raise NotFoundException(f"{self.label} not found")
        record = self.records.get(entity.current_status_id) if entity.current_status_id else None
        if record is None or record.owner_id != entity_id:
            raise InconsistentStateError(f"{self.label} {entity_id} has no valid current status")
        return record

    async def history(self, entity_id: UUID) -> list[FakeStatusRecord]:
        return sorted(
            (record for record in self.records.values() if record.owner_id == entity_id),
            key=lambda record: (record.created_at, record.id),
        )


class FakeQuotesRepository:
    def __init__(self, store: FakeStore, fail_for_teacher_ids: set[UUID] | None = None) -> None:
        self.store = store
        self.fail_for_teacher_ids = fail_for_teacher_ids or set()
        self.ledger = FakeLedger(store, store.quotes, store.quote_statuses, "Lesson quote")

    async def create_quote(
        self,
        lesson_request_id: UUID,
        teacher_id: UUID,
        hourly_rate_in_cents: int,
        cost_in_cents: int,
    ) -> FakeQuote:
        duplicate = any(
            quote.lesson_request_id == lesson_request_id and quote.teacher_id == teacher_id
            for quote in self.store.quotes.values()
        )
        if duplicate or teacher_id in self.fail_for_teacher_ids:
            raise ConflictException("Operation conflicts with existing data")
        quote = FakeQuote(
            id=uuid4(),
            lesson_request_id=lesson_request_id,
            lesson_request=self.store.requests[lesson_request_id],
            teacher_id=teacher_id,
            hourly_rate_in_cents=hourly_rate_in_cents,
            cost_in_cents=cost_in_cents,
        )
        self.store.insert(self.store.quotes, quote)
        return quote

    async def get_quote_by_id(self, quote_id: UUID) -> FakeQuote | None:
        await asyncio.sleep(0)
        return self.store.quotes.get(quote_id)

    async def get_quote_for_update(self, quote_id: UUID) -> FakeQuote | None:
        await self.store.lock_row("quote", quote_id)
        return await self.get_quote_by_id(quote_id)

    async def lock_request(self, lesson_request_id: UUID) -> None:
        await self.store.lock_row("request", lesson_request_id)

    async def list_quotes_for_request(self, lesson_request_id: UUID) -> list[FakeQuote]:
        await asyncio.sleep(0)
        return self.store.quotes_for_request(lesson_request_id)

    async def append_status(self, quote: FakeQuote, status: QuoteStatusEnum, context=None) -> FakeStatusRecord:
        return await self.ledger.append_status(quote, status, context)

    async def current_status(self, quote_id: UUID) -> FakeStatusRecord:
        return await self.ledger.current_status(quote_id)

    async def history(self, quote_id: UUID) -> list[FakeStatusRecord]:
        return await self.ledger.history(quote_id)


class FakeLessonsRepository:
    def __init__(self, store: FakeStore) -> None:
        self.store = store
        self.ledger = FakeLedger(store, store.lessons, store.lesson_statuses, "Lesson")

    async def create_lesson(self, quote_id: UUID) -> FakeLesson:
        await asyncio.sleep(0)
        if self.store.lesson_for_quote(quote_id) is not None:
            # lessons.quote_id is unique
            raise ConflictException("Operation conflicts with existing data")
        lesson = FakeLesson(id=uuid4(), quote_id=quote_id, quote=self.store.quotes[quote_id])
        self.store.insert(self.store.lessons, lesson)
        return lesson

    async def get_lesson_by_id(self, lesson_id: UUID) -> FakeLesson | None:
        await asyncio.sleep(0)
        return self.store.lessons.get(lesson_id)

    async def get_lesson_for_update(self, lesson_id: UUID) -> FakeLesson | None:
        await self.store.lock_row("lesson", lesson_id)
        return await self.get_lesson_by_id(lesson_id)

    async def get_lesson_by_quote_id(self, quote_id: UUID) -> FakeLesson | None:
        await asyncio.sleep(0)
        return self.store.lesson_for_quote(quote_id)

    async def list_lessons_for_user(self, user_id: UUID, role_name: RoleEnum, limit: int, offset: int):
        lessons = [
            lesson
            for lesson in self.store.lessons.values()
            if role_name == RoleEnum.ADMIN
            or (role_name == RoleEnum.STUDENT and lesson.student_id == user_id)
            or (role_name == RoleEnum.TEACHER and lesson.teacher_id == user_id)
        ]
        return lessons[offset : offset + limit], len(lessons)

    async def append_status(self, lesson: FakeLesson, status: LessonStatusEnum, context=None) -> FakeStatusRecord:
        return await self.ledger.append_status(lesson, status, context)

    async def current_status(self, lesson_id: UUID) -> FakeStatusRecord:
        return await self.ledger.current_status(lesson_id)

    async def history(self, lesson_id: UUID) -> list[FakeStatusRecord]:
        return await self.ledger.history(lesson_id)

    async def create_summary(self, lesson_id: UUID, summary: str, homework: str) -> FakeLessonSummary:
        await asyncio.sleep(0)
        if any(item.lesson_id == lesson_id for item in self.store.lesson_summaries.values()):
            # lesson_summaries.lesson_id is unique
            raise ConflictException("Operation conflicts with existing data")
        lesson_summary = FakeLessonSummary(id=uuid4(), lesson_id=lesson_id, summary=summary, homework=homework)
        self.store.insert(self.store.lesson_summaries, lesson_summary)
        return lesson_summary

    async def get_summary_by_lesson_id(self, lesson_id: UUID) -> FakeLessonSummary | None:
        await asyncio.sleep(0)
        return next((item for item in self.store.lesson_summaries.values() if item.lesson_id == lesson_id), None)


class FakeGoalsRepository:
    def __init__(self, store: FakeStore) -> None:
        self.store = store
        self.ledger = FakeLedger(store, store.goals, store.goal_statuses, "Goal")

    async def create_goal(
        self,
        lesson_id: UUID,
        title: str,
        description: str,
        estimated_lesson_count: int,
    ) -> FakeGoal:
        goal = FakeGoal(
            id=uuid4(),
            lesson_id=lesson_id,
            lesson=self.store.lessons[lesson_id],
            title=title,
            description=description,
            estimated_lesson_count=estimated_lesson_count,
        )
        self.store.insert(self.store.goals, goal)
        return goal

    async def get_goal_by_id(self, goal_id: UUID) -> FakeGoal | None:
        await asyncio.sleep(0)
        return self.store.goals.get(goal_id)

    async def get_goal_for_update(self, goal_id: UUID) -> FakeGoal | None:
        await self.store.lock_row("goal", goal_id)
        return await self.get_goal_by_id(goal_id)

    async def list_goals_for_lesson(self, lesson_id: UUID) -> list[FakeGoal]:
        await asyncio.sleep(0)
        return sorted(
            (goal for goal in self.store.goals.values() if goal.lesson_id == lesson_id),
            key=lambda goal: (goal.created_at, goal.id),
        )

    async def append_status(self, goal: FakeGoal, status: GoalStatusEnum, context=None) -> FakeStatusRecord:
        return await self.ledger.append_status(goal, status, context)

    async def current_status(self, goal_id: UUID) -> FakeStatusRecord:
        return await self.ledger.current_status(goal_id)

    async def history(self, goal_id: UUID) -> list[FakeStatusRecord]:
        return await self.ledger.history(goal_id)


class FakeTeacherDirectory:
    def __init__(self, store: FakeStore) -> None:
        self.store = store
        self.requested_limits: list[int] = []

    async def find_eligible_teachers(self, lesson_type: LessonTypeEnum, limit: int) -> list[EligibleTeacher]:
        self.requested_limits.append(limit)
        return [teacher for teacher in self.store.teachers if lesson_type in teacher.active_rates][:limit]


class FakeAuditRepository:
    def __init__(self, store: FakeStore | None = None, fail: bool = False) -> None:
        self.store = store
        self.fail = fail
        self.logs: list[dict] = []

    async def create_audit_log(
        self,
        actor_id: UUID | None,
        action: str,
        entity_type: str,
        entity_id: str | None,
        payload: dict,
    ) -> dict:
        if self.fail:
            raise RuntimeError("audit storage unavailable")
        log = {
            "actor_id": actor_id,
            "action": action,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "payload": payload,
        }
        self.logs.append(log)
        if self.store is not None:
            self.store.on_rollback(lambda: self.logs.remove(log))
        return log


def build_lifecycle_services(
    store: FakeStore,
    *,
    quote_teacher_limit: int = 5,
    fail_for_teacher_ids: set[UUID] | None = None,
    audit: FakeAuditRepository | None = None,
) -> SimpleNamespace:
    from app.core.config import Settings
    from app.modules.goals.service import GoalsService
    from app.modules.lessons.service import LessonsService
    from app.modules.lifecycle.service import LifecycleService
    from app.modules.quotes.service import QuotesService

    transactions = FakeTransactionManager(store)
    audit = audit or FakeAuditRepository(store)
    directory = FakeTeacherDirectory(store)
    quotes_repository = FakeQuotesRepository(store, fail_for_teacher_ids)
    lessons_repository = FakeLessonsRepository(store)
    goals_repository = FakeGoalsRepository(store)
    lessons = LessonsService(
        repository=lessons_repository,
        quotes_repository=quotes_repository,
        transactions=transactions,
        audit_repository=audit,
    )
    quotes = QuotesService(
        repository=quotes_repository,
        teachers_repository=directory,
        lessons_service=lessons,
        transactions=transactions,
        audit_repository=audit,
        settings=Settings(_env_file=None, quote_teacher_limit=quote_teacher_limit),
    )
    goals = GoalsService(
        repository=goals_repository,
        lessons_repository=lessons_repository,
        transactions=transactions,
        audit_repository=audit,
    )
    return SimpleNamespace(
        quotes=quotes,
        lessons=lessons,
        goals=goals,
        lifecycle=LifecycleService(lessons_repository, quotes_repository, goals_repository),
        quotes_repository=quotes_repository,
        lessons_repository=lessons_repository,
        goals_repository=goals_repository,
        directory=directory,
        audit=audit,
    )
