"""Seed idempotent demo data for local/non-production environments."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

import app.modules  # noqa: F401
from app.core.config import get_settings
from app.core.database import SessionLocal, TransactionManager, close_engine
from app.core.enums import LessonTypeEnum, RoleEnum
from app.core.security import create_access_token
from app.modules.audit.repository import AuditRepository
from app.modules.identity.models import User
from app.modules.identity.repository import IdentityRepository
from app.modules.identity.service import IdentityService
from app.modules.teachers.repository import TeachersRepository
from app.modules.teachers.schemas import HourlyRateCreate, TeacherProfileUpsert
from app.modules.teachers.service import TeachersService

DEMO_ADMIN_EMAIL = "demo-admin@tutormarket.dev"
DEMO_STUDENT_EMAIL = "demo-student@tutormarket.dev"

# email, display name, experience years, hourly rates in cents by lesson type
DEMO_TEACHERS = (
    (
        "demo-teacher-1@tutormarket.dev",
        "Ada Strings",
        12,
        {LessonTypeEnum.GUITAR: 6000, LessonTypeEnum.BASS: 5500},
    ),
    (
        "demo-teacher-2@tutormarket.dev",
        "Ben Chords",
        7,
        {LessonTypeEnum.GUITAR: 4500, LessonTypeEnum.VOICE: 5000},
    ),
    (
        "demo-teacher-3@tutormarket.dev",
        "Cleo Beats",
        4,
        {LessonTypeEnum.GUITAR: 3500, LessonTypeEnum.DRUMS: 4000},
    ),
)


@dataclass(slots=True)
class SeedStats:
    users_created: int = 0
    rates_created: int = 0
    tokens: dict[str, str] = field(default_factory=dict)


async def _ensure_user(
    repository: IdentityRepository,
    *,
    email: str,
    role_name: RoleEnum,
    first_name: str = "",
    last_name: str = "",
) -> tuple[User, bool]:
    user = await repository.get_user_by_email(email)
    if user is not None:
        return user, False

    role = await repository.get_role_by_name(role_name)
    if role is None:
        raise RuntimeError(f"Role {role_name} was not found after ensure_default_roles")

    user = await repository.create_user(
        email=email,
        first_name=first_name,
        last_name=last_name,
        role_id=role.id,
    )
    return user, True


async def _ensure_teacher(
    session: AsyncSession,
    teacher: User,
    display_name: str,
    experience_years: int,
    rates: dict[LessonTypeEnum, int],
) -> int:
    teachers_repository = TeachersRepository(session)
    service = TeachersService(
        repository=teachers_repository,
        transactions=TransactionManager(session),
        audit_repository=AuditRepository(session),
    )
    await service.upsert_profile(
        TeacherProfileUpsert(display_name=display_name, experience_years=experience_years),
        teacher,
    )

    created = 0
    for lesson_type, rate_in_cents in rates.items():
        if await teachers_repository.get_rate_for_type(teacher.id, lesson_type) is not None:
            continue
        await service.create_rate(HourlyRateCreate(lesson_type=lesson_type, rate_in_cents=rate_in_cents), teacher)
        created += 1
    return created


async def _run_seed(*, allow_production: bool) -> SeedStats:
    settings = get_settings()
    app_env = settings.app_env.strip().lower()
    if app_env in {"production", "prod"} and not allow_production:
        raise RuntimeError(
            "Refusing to seed demo data in production. "
            "Re-run with --allow-production only if you are absolutely sure.",
        )

    stats = SeedStats()

    async with SessionLocal() as session:
        try:
            repository = IdentityRepository(session)
            await IdentityService(repository).ensure_default_roles()

            users: list[User] = []
            for email, role_name in (
                (DEMO_ADMIN_EMAIL, RoleEnum.ADMIN),
                (DEMO_STUDENT_EMAIL, RoleEnum.STUDENT),
            ):
                user, created = await _ensure_user(repository, email=email, role_name=role_name)
                stats.users_created += int(created)
                users.append(user)

            for email, display_name, experience_years, rates in DEMO_TEACHERS:
                first_name, _, last_name = display_name.partition(" ")
                teacher, created = await _ensure_user(
                    repository,
                    email=email,
                    role_name=RoleEnum.TEACHER,
                    first_name=first_name,
                    last_name=last_name,
                )
                stats.users_created += int(created)
                stats.rates_created += await _ensure_teacher(
                    session,
                    teacher,
                    display_name,
                    experience_years,
                    rates,
                )
                users.append(teacher)

            await session.commit()
        except Exception:
            await session.rollback()
            raise

    stats.tokens = {user.email: create_access_token(str(user.id)) for user in users}
    return stats


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Seed idempotent demo data for TutorMarket (admin, student, teachers "
            "with profiles and active hourly rates)."
        ),
    )
    parser.add_argument(
        "--allow-production",
        action="store_true",
        help="Allow seeding even when APP_ENV is production/prod.",
    )
    return parser


def _print_summary(stats: SeedStats) -> None:
    print("Demo seed completed.")
    print(f"- Users created: {stats.users_created}")
    print(f"- Hourly rates created: {stats.rates_created}")
    print("")
    print("Demo bearer tokens (non-production only):")
    for email, token in stats.tokens.items():
        print(f"- {email}: {token}")


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()

    try:
        stats = asyncio.run(_run_seed(allow_production=args.allow_production))
    except Exception as exc:
        print(f"Demo seed failed: {exc}")
        return 1
    finally:
        asyncio.run(close_engine())

    _print_summary(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
