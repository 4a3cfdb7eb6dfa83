"""initial schema: profiles, courses, events, feedback

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("department", sa.String(length=255), nullable=True),
        sa.Column("organization_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_profiles_organization_id", "profiles", ["organization_id"])

    op.create_table(
        "courses",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("student_count", sa.Integer(), nullable=True),
        sa.Column("cycle", sa.String(length=100), nullable=True),
        sa.Column("teacher", sa.String(length=255), nullable=True),
        sa.Column("organization_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_courses_owner_id", "courses", ["owner_id"])
    op.create_index("ix_courses_organization_id", "courses", ["organization_id"])

    op.create_table(
        "events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("course_id", sa.Uuid(), nullable=False),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("entry_code", sa.String(length=4), nullable=True, comment="Unique among open events"),
        sa.Column("organization_id", sa.Uuid(), nullable=True),
        sa.Column("positive_feedback_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("negative_feedback_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("neutral_feedback_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_feedback_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("positive_feedback_count >= 0", name="ck_events_positive_nonneg"),
        sa.CheckConstraint("negative_feedback_count >= 0", name="ck_events_negative_nonneg"),
        sa.CheckConstraint("neutral_feedback_count >= 0", name="ck_events_neutral_nonneg"),
        sa.CheckConstraint("total_feedback_count >= 0", name="ck_events_total_nonneg"),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_events_course_id", "events", ["course_id"])
    op.create_index("ix_events_status", "events", ["status"])
    op.create_index("ix_events_entry_code", "events", ["entry_code"])
    op.create_index("ix_events_organization_id", "events", ["organization_id"])
    op.create_index(
        "uq_events_open_entry_code",
        "events",
        ["entry_code"],
        unique=True,
        postgresql_where=sa.text("status = 'open'"),
    )

    op.create_table(
        "feedback",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("event_id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("tone", sa.String(length=20), nullable=False),
        sa.Column("is_reviewed", sa.Boolean(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_feedback_event_id", "feedback", ["event_id"])
    op.create_index("ix_feedback_tone", "feedback", ["tone"])
    op.create_index("ix_feedback_organization_id", "feedback", ["organization_id"])


def downgrade() -> None:
    op.drop_table("feedback")
    op.drop_index("uq_events_open_entry_code", table_name="events")
    op.drop_table("events")
    op.drop_table("courses")
    op.drop_table("profiles")
