from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from app.core.config import Settings
from app.core.enums import LessonTypeEnum, RoleEnum
from app.modules.lesson_requests.schemas import LessonRequestCreate
from app.modules.lesson_requests.service import LessonRequestsService
from app.shared.exceptions import BusinessRuleException, ForbiddenException, NotFoundException
from tests.fakes import FakeLessonRequest, FakeStore, FakeTransactionManager, make_actor


@dataclass
class FakeLessonRequestsRepository:
    requests: dict[UUID, FakeLessonRequest] = field(default_factory=dict)

    async def create_request(self, student_id, lesson_type, start_at, duration_minutes, address):
        request = FakeLessonRequest(
            id=uuid4(),
            student_id=student_id,
            lesson_type=lesson_type,
            start_at=start_at,
            duration_minutes=duration_minutes,
            address=address,
        )
        self.requests[request.id] = request
        return request

    async def get_request_by_id(self, request_id: UUID):
        return self.requests.get(request_id)

    async def list_requests_for_student(self, student_id: UUID, limit: int, offset: int):
        items = [request for request in self.requests.values() if request.student_id == student_id]
        return items[offset : offset + limit], len(items)


@dataclass
class FakeQuotesService:
    quoted_teacher_ids: list[UUID] = field(default_factory=list)
    quoted_requests: list[FakeLessonRequest] = field(default_factory=list)

    async def create_quotes_for_request(self, request):
        self.quoted_requests.append(request)
        return [f"quote-{teacher_id}" for teacher_id in self.quoted_teacher_ids]

    async def list_quotes_for_request(self, request, actor):
        if actor.id in self.quoted_teacher_ids:
            return [f"quote-{actor.id}"]
        return []


def _build_service(quoted_teacher_ids: list[UUID] | None = None):
    repository = FakeLessonRequestsRepository()
    quotes_service = FakeQuotesService(quoted_teacher_ids=quoted_teacher_ids or [])
    service = LessonRequestsService(
        repository=repository,
        quotes_service=quotes_service,
        transactions=FakeTransactionManager(FakeStore()),
        settings=Settings(_env_file=None, lesson_min_duration_minutes=30, lesson_max_duration_minutes=120),
    )
    return service, repository, quotes_service


def _payload(**overrides) -> LessonRequestCreate:
    data = {
        "lesson_type": LessonTypeEnum.GUITAR,
        "start_at": datetime.now(UTC) + timedelta(days=2),
        "duration_minutes": 60,
        "address": "12 Harmony Street",
    }
    data.update(overrides)
    return LessonRequestCreate(**data)


@pytest.mark.asyncio
async def test_submit_request_stores_request_and_generates_quotes() -> None:
    teacher_ids = [uuid4(), uuid4()]
    service, repository, quotes_service = _build_service(teacher_ids)
    student = make_actor(uuid4(), RoleEnum.STUDENT)

    request, quotes = await service.submit_request(_payload(), student)

    assert request.student_id == student.id
    assert repository.requests[request.id] is request
    assert quotes_service.quoted_requests == [request]
    assert len(quotes) == 2


@pytest.mark.asyncio
async def test_submit_request_normalizes_naive_start_to_utc() -> None:
    service, _, _ = _build_service()
    naive_start = (datetime.now(UTC) + timedelta(days=1)).replace(tzinfo=None)

    request, _ = await service.submit_request(_payload(start_at=naive_start), make_actor(uuid4(), RoleEnum.STUDENT))

    assert request.start_at.tzinfo is not None


def test_request_start_with_offset_is_converted_to_utc() -> None:
    local_start = datetime(2030, 5, 1, 12, 0, tzinfo=timezone(timedelta(hours=3)))

    payload = _payload(start_at=local_start)

    assert payload.start_at == datetime(2030, 5, 1, 9, 0, tzinfo=UTC)
    assert payload.start_at.utcoffset() == timedelta(0)


@pytest.mark.asyncio
async def test_only_students_submit_requests() -> None:
    service, repository, _ = _build_service()

    with pytest.raises(ForbiddenException):
        await service.submit_request(_payload(), make_actor(uuid4(), RoleEnum.TEACHER))
    assert repository.requests == {}


@pytest.mark.asyncio
async def test_submit_request_rejects_start_in_the_past() -> None:
    service, _, _ = _build_service()

    with pytest.raises(BusinessRuleException):
        await service.submit_request(
            _payload(start_at=datetime.now(UTC) - timedelta(minutes=1)),
            make_actor(uuid4(), RoleEnum.STUDENT),
        )


@pytest.mark.asyncio
@pytest.mark.parametrize("duration", [15, 29, 121, 240])
async def test_submit_request_enforces_duration_bounds(duration: int) -> None:
    service, _, quotes_service = _build_service()

    with pytest.raises(BusinessRuleException):
        await service.submit_request(_payload(duration_minutes=duration), make_actor(uuid4(), RoleEnum.STUDENT))
    assert quotes_service.quoted_requests == []


@pytest.mark.asyncio
async def test_request_visibility() -> None:
    quoted_teacher = uuid4()
    service, _, _ = _build_service([quoted_teacher])
    student = make_actor(uuid4(), RoleEnum.STUDENT)
    request, _ = await service.submit_request(_payload(), student)

    assert await service.get_request(request.id, student) is request
    assert await service.get_request(request.id, make_actor(uuid4(), RoleEnum.ADMIN)) is request
    assert await service.get_request(request.id, make_actor(quoted_teacher, RoleEnum.TEACHER)) is request

    with pytest.raises(ForbiddenException):
        await service.get_request(request.id, make_actor(uuid4(), RoleEnum.TEACHER))
    with pytest.raises(ForbiddenException):
        await service.get_request(request.id, make_actor(uuid4(), RoleEnum.STUDENT))
    with pytest.raises(NotFoundException):
        await service.get_request(uuid4(), student)


@pytest.mark.asyncio
async def test_list_my_requests() -> None:
    service, _, _ = _build_service()
    student = make_actor(uuid4(), RoleEnum.STUDENT)
    await service.submit_request(_payload(), student)
    await service.submit_request(_payload(lesson_type=LessonTypeEnum.DRUMS), student)
    await service.submit_request(_payload(), make_actor(uuid4(), RoleEnum.STUDENT))

    items, total = await service.list_my_requests(student, limit=1, offset=0)

    assert total == 2
    assert len(items) == 1
    with pytest.raises(ForbiddenException):
        await service.list_my_requests(make_actor(uuid4(), RoleEnum.TEACHER), limit=10, offset=0)
