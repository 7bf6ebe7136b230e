"""initial_taskflow_schema

Create accounts, user_groups, applications, plans and tasks.

Revision ID: 7c1e2a9d4b10
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "7c1e2a9d4b10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    existing_tables = set(sa_inspect(bind).get_table_names())

    if "user_groups" not in existing_tables:
        op.create_table(
            "user_groups",
            sa.Column("name", sa.String(length=50), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("name"),
        )

    if "accounts" not in existing_tables:
        op.create_table(
            "accounts",
            sa.Column("username", sa.String(length=50), nullable=False),
            sa.Column("email", sa.String(length=200), nullable=True),
            sa.Column("password_hash", sa.String(length=256), nullable=False),
            sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("usergroups", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("username"),
            sa.UniqueConstraint("email"),
        )

    if "applications" not in existing_tables:
        op.create_table(
            "applications",
            sa.Column("acronym", sa.String(length=50), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("r_number", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("start_date", sa.Date(), nullable=True),
            sa.Column("end_date", sa.Date(), nullable=True),
            sa.Column("permit_create", sa.Text(), nullable=True),
            sa.Column("permit_open", sa.Text(), nullable=True),
            sa.Column("permit_todo", sa.Text(), nullable=True),
            sa.Column("permit_doing", sa.Text(), nullable=True),
            sa.Column("permit_done", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("acronym"),
        )

    if "plans" not in existing_tables:
        op.create_table(
            "plans",
            sa.Column("name", sa.String(length=50), nullable=False),
            sa.Column("app_acronym", sa.String(length=50), nullable=True),
            sa.Column("start_date", sa.Date(), nullable=True),
            sa.Column("end_date", sa.Date(), nullable=True),
            sa.ForeignKeyConstraint(["app_acronym"], ["applications.acronym"]),
            sa.PrimaryKeyConstraint("name"),
        )
        op.create_index("ix_plans_app_acronym", "plans", ["app_acronym"])

    if "tasks" not in existing_tables:
        op.create_table(
            "tasks",
            sa.Column("task_id", sa.String(length=80), nullable=False),
            sa.Column("name", sa.String(length=50), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("plan", sa.String(length=50), nullable=True),
            sa.Column("app_acronym", sa.String(length=50), nullable=False),
            sa.Column("state", sa.String(length=10), nullable=False, server_default="Open"),
            sa.Column("creator", sa.String(length=50), nullable=False),
            sa.Column("owner", sa.String(length=50), nullable=True),
            sa.Column("create_date", sa.Date(), nullable=False),
            sa.ForeignKeyConstraint(["app_acronym"], ["applications.acronym"]),
            sa.PrimaryKeyConstraint("task_id"),
            sa.UniqueConstraint("name"),
        )
        op.create_index("ix_tasks_app_acronym", "tasks", ["app_acronym"])
        op.create_index("ix_tasks_plan", "tasks", ["plan"])
        op.create_index("ix_tasks_state", "tasks", ["state"])


def downgrade():
    op.drop_table("tasks")
    op.drop_table("plans")
    op.drop_table("applications")
    op.drop_table("accounts")
    op.drop_table("user_groups")
