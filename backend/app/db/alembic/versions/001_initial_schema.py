"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates:
- environment, app_user
- template, course (tenant-scoped through environment_id, NULL = global)
- activity
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables."""
    # environment table
    op.create_table(
        "environment",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("primary_domain", sa.Text(), nullable=False),
        sa.Column("additional_domains", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_environment_primary_domain", "environment", ["primary_domain"])

    # app_user table
    op.create_table(
        "app_user",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("role", sa.String(32), nullable=False),
        sa.UniqueConstraint("email"),
    )

    # template table
    op.create_table(
        "template",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("environment_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["environment_id"], ["environment.id"]),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("idx_template_env", "template", ["environment_id"])

    # course table
    op.create_table(
        "course",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("template_id", sa.Integer(), nullable=True),
        sa.Column("environment_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["template_id"], ["template.id"]),
        sa.ForeignKeyConstraint(["environment_id"], ["environment.id"]),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("idx_course_env_status", "course", ["environment_id", "status"])

    # activity table
    op.create_table(
        "activity",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["course_id"], ["course.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_activity_course_order", "activity", ["course_id", "order"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_activity_course_order", table_name="activity")
    op.drop_table("activity")
    op.drop_index("idx_course_env_status", table_name="course")
    op.drop_table("course")
    op.drop_index("idx_template_env", table_name="template")
    op.drop_table("template")
    op.drop_table("app_user")
    op.drop_index("ix_environment_primary_domain", table_name="environment")
    op.drop_table("environment")
