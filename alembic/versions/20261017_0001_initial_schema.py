"""Initial schema

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 10:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261017_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


role_enum = sa.Enum("STUDENT", "TEACHER", "ADMIN", name="role_enum", native_enum=False)
lesson_type_enum = sa.Enum("VOICE", "GUITAR", "BASS", "DRUMS", name="lesson_type_enum", native_enum=False)
rate_status_enum = sa.Enum("ACTIVE", "INACTIVE", name="rate_status_enum", native_enum=False)
quote_status_enum = sa.Enum(
    "CREATED",
    "ACCEPTED",
    "REJECTED",
    "EXPIRED",
    name="quote_status_enum",
    native_enum=False,
)
lesson_status_enum = sa.Enum(
    "REQUESTED",
    "ACCEPTED",
    "DEFINED",
    "COMPLETED",
    "REJECTED",
    "VOIDED",
    name="lesson_status_enum",
    native_enum=False,
)
goal_status_enum = sa.Enum(
    "CREATED",
    "IN_PROGRESS",
    "ACHIEVED",
    "ABANDONED",
    name="goal_status_enum",
    native_enum=False,
)


def _id_col() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False)


def _created_col() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_col() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def _uuid_col(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), nullable=nullable)


def _status_table(table_name: str, owner_column: str, owner_table: str, status_enum: sa.Enum) -> None:
    op.create_table(
        table_name,
        _id_col(),
        _created_col(),
        _uuid_col(owner_column),
        sa.Column("status", status_enum, nullable=False),
        sa.Column("context", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.ForeignKeyConstraint(
            [owner_column],
            [f"{owner_table}.id"],
            name=f"fk_{table_name}_{owner_column}_{owner_table}",
            ondelete="CASCADE",
        ),
    )
    op.create_index(f"ix_{table_name}_{owner_column}", table_name, [owner_column], unique=False)
    op.create_index(f"ix_{table_name}_created_at", table_name, ["created_at"], unique=False)


def upgrade() -> None:
    op.create_table(
        "roles",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("name", role_enum, nullable=False),
        sa.UniqueConstraint("name", name="uq_roles_name"),
    )

    op.create_table(
        "users",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=128), nullable=False),
        sa.Column("last_name", sa.String(length=128), nullable=False),
        sa.Column("timezone", sa.String(length=64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        _uuid_col("role_id"),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], name="fk_users_role_id_roles", ondelete="RESTRICT"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=False)

    op.create_table(
        "teacher_profiles",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid_col("user_id"),
        sa.Column("display_name", sa.String(length=128), nullable=False),
        sa.Column("bio", sa.Text(), nullable=False),
        sa.Column("experience_years", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_teacher_profiles_user_id_users", ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", name="uq_teacher_profiles_user_id"),
    )

    op.create_table(
        "teacher_lesson_hourly_rates",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid_col("teacher_id"),
        sa.Column("lesson_type", lesson_type_enum, nullable=False),
        sa.Column("rate_in_cents", sa.Integer(), nullable=False),
        _uuid_col("current_status_id", nullable=True),
        sa.ForeignKeyConstraint(
            ["teacher_id"],
            ["users.id"],
            name="fk_teacher_lesson_hourly_rates_teacher_id_users",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("teacher_id", "lesson_type", name="uq_teacher_lesson_hourly_rates_teacher_type"),
        sa.CheckConstraint("rate_in_cents > 0", name="ck_teacher_lesson_hourly_rates_positive_rate"),
    )
    op.create_index(
        "ix_teacher_lesson_hourly_rates_teacher_id",
        "teacher_lesson_hourly_rates",
        ["teacher_id"],
        unique=False,
    )
    _status_table("teacher_lesson_hourly_rate_statuses", "rate_id", "teacher_lesson_hourly_rates", rate_status_enum)
    op.create_foreign_key(
        "fk_teacher_lesson_hourly_rates_current_status",
        "teacher_lesson_hourly_rates",
        "teacher_lesson_hourly_rate_statuses",
        ["current_status_id"],
        ["id"],
        ondelete="RESTRICT",
    )

    op.create_table(
        "lesson_requests",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid_col("student_id"),
        sa.Column("lesson_type", lesson_type_enum, nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("address", sa.String(length=512), nullable=False),
        sa.ForeignKeyConstraint(["student_id"], ["users.id"], name="fk_lesson_requests_student_id_users", ondelete="CASCADE"),
        sa.CheckConstraint("duration_minutes > 0", name="ck_lesson_requests_positive_duration"),
    )
    op.create_index("ix_lesson_requests_student_id", "lesson_requests", ["student_id"], unique=False)

    op.create_table(
        "lesson_quotes",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid_col("lesson_request_id"),
        _uuid_col("teacher_id"),
        sa.Column("hourly_rate_in_cents", sa.Integer(), nullable=False),
        sa.Column("cost_in_cents", sa.Integer(), nullable=False),
        _uuid_col("current_status_id", nullable=True),
        sa.ForeignKeyConstraint(
            ["lesson_request_id"],
            ["lesson_requests.id"],
            name="fk_lesson_quotes_lesson_request_id_lesson_requests",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.id"], name="fk_lesson_quotes_teacher_id_users", ondelete="CASCADE"),
        sa.UniqueConstraint("lesson_request_id", "teacher_id", name="uq_lesson_quotes_request_teacher"),
        sa.CheckConstraint("cost_in_cents >= 0", name="ck_lesson_quotes_non_negative_cost"),
    )
    op.create_index("ix_lesson_quotes_lesson_request_id", "lesson_quotes", ["lesson_request_id"], unique=False)
    op.create_index("ix_lesson_quotes_teacher_id", "lesson_quotes", ["teacher_id"], unique=False)
    _status_table("lesson_quote_statuses", "lesson_quote_id", "lesson_quotes", quote_status_enum)
    op.create_foreign_key(
        "fk_lesson_quotes_current_status",
        "lesson_quotes",
        "lesson_quote_statuses",
        ["current_status_id"],
        ["id"],
        ondelete="RESTRICT",
    )

    op.create_table(
        "lessons",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid_col("quote_id"),
        _uuid_col("current_status_id", nullable=True),
        sa.ForeignKeyConstraint(["quote_id"], ["lesson_quotes.id"], name="fk_lessons_quote_id_lesson_quotes", ondelete="RESTRICT"),
        sa.UniqueConstraint("quote_id", name="uq_lessons_quote_id"),
    )
    op.create_index("ix_lessons_quote_id", "lessons", ["quote_id"], unique=False)
    _status_table("lesson_statuses", "lesson_id", "lessons", lesson_status_enum)
    op.create_foreign_key(
        "fk_lessons_current_status",
        "lessons",
        "lesson_statuses",
        ["current_status_id"],
        ["id"],
        ondelete="RESTRICT",
    )

    op.create_table(
        "lesson_summaries",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid_col("lesson_id"),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("homework", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["lesson_id"], ["lessons.id"], name="fk_lesson_summaries_lesson_id_lessons", ondelete="CASCADE"),
        sa.UniqueConstraint("lesson_id", name="uq_lesson_summaries_lesson_id"),
    )
    op.create_index("ix_lesson_summaries_lesson_id", "lesson_summaries", ["lesson_id"], unique=False)

    op.create_table(
        "goals",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid_col("lesson_id"),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("estimated_lesson_count", sa.Integer(), nullable=False),
        _uuid_col("current_status_id", nullable=True),
        sa.ForeignKeyConstraint(["lesson_id"], ["lessons.id"], name="fk_goals_lesson_id_lessons", ondelete="RESTRICT"),
        sa.CheckConstraint("estimated_lesson_count > 0", name="ck_goals_positive_estimated_lesson_count"),
    )
    op.create_index("ix_goals_lesson_id", "goals", ["lesson_id"], unique=False)
    _status_table("goal_statuses", "goal_id", "goals", goal_status_enum)
    op.create_foreign_key(
        "fk_goals_current_status",
        "goals",
        "goal_statuses",
        ["current_status_id"],
        ["id"],
        ondelete="RESTRICT",
    )

    op.create_table(
        "audit_logs",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid_col("actor_id", nullable=True),
        sa.Column("action", sa.String(length=128), nullable=False),
        sa.Column("entity_type", sa.String(length=128), nullable=False),
        sa.Column("entity_id", sa.String(length=128), nullable=True),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.ForeignKeyConstraint(["actor_id"], ["users.id"], name="fk_audit_logs_actor_id_users", ondelete="SET NULL"),
    )
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"], unique=False)
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_audit_logs_action", table_name="audit_logs")
    op.drop_index("ix_audit_logs_actor_id", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_constraint("fk_goals_current_status", "goals", type_="foreignkey")
    op.drop_index("ix_goal_statuses_created_at", table_name="goal_statuses")
    op.drop_index("ix_goal_statuses_goal_id", table_name="goal_statuses")
    op.drop_table("goal_statuses")
    op.drop_index("ix_goals_lesson_id", table_name="goals")
    op.drop_table("goals")
    op.drop_index("ix_lesson_summaries_lesson_id", table_name="lesson_summaries")
    op.drop_table("lesson_summaries")

    for owner_table, status_table, owner_column, fk_name in (
        ("lessons", "lesson_statuses", "lesson_id", "fk_lessons_current_status"),
        ("lesson_quotes", "lesson_quote_statuses", "lesson_quote_id", "fk_lesson_quotes_current_status"),
        (
            "teacher_lesson_hourly_rates",
            "teacher_lesson_hourly_rate_statuses",
            "rate_id",
            "fk_teacher_lesson_hourly_rates_current_status",
        ),
    ):
        op.drop_constraint(fk_name, owner_table, type_="foreignkey")
        op.drop_index(f"ix_{status_table}_created_at", table_name=status_table)
        op.drop_index(f"ix_{status_table}_{owner_column}", table_name=status_table)
        op.drop_table(status_table)

        if owner_table == "lessons":
            op.drop_index("ix_lessons_quote_id", table_name="lessons")
            op.drop_table("lessons")
        elif owner_table == "lesson_quotes":
            op.drop_index("ix_lesson_quotes_teacher_id", table_name="lesson_quotes")
            op.drop_index("ix_lesson_quotes_lesson_request_id", table_name="lesson_quotes")
            op.drop_table("lesson_quotes")
            op.drop_index("ix_lesson_requests_student_id", table_name="lesson_requests")
            op.drop_table("lesson_requests")
        else:
            op.drop_index("ix_teacher_lesson_hourly_rates_teacher_id", table_name="teacher_lesson_hourly_rates")
            op.drop_table("teacher_lesson_hourly_rates")

    op.drop_table("teacher_profiles")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_table("roles")
