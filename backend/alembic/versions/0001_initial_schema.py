"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2025-10-09

Creates all tables for the Lunch Planner application:
users, groups, group_members, day_statuses.
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
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("avatar", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- groups ---
    op.create_table(
        "groups",
        sa.Column("group_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("code", sa.String(6), nullable=False, unique=True),
        sa.Column("invite_link", sa.String(32), nullable=False, unique=True),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("privacy", sa.String(10), nullable=False, server_default="private"),
        sa.Column("category", sa.String(20), nullable=True),
        sa.Column("tags", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- group_members ---
    op.create_table(
        "group_members",
        sa.Column(
            "group_id", sa.String(36),
            sa.ForeignKey("groups.group_id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- day_statuses ---
    op.create_table(
        "day_statuses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "group_id", sa.String(36),
            sa.ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=True,
        ),
        sa.Column("iso_week", sa.String(10), nullable=False),
        sa.Column("weekday", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=True),
        sa.Column("arrival_time", sa.Time, nullable=True),
        sa.Column("location", sa.String(120), nullable=True),
        sa.Column("start_location", sa.String(120), nullable=True),
        sa.Column("eat_location", sa.String(120), nullable=True),
        sa.Column("note", sa.Text, nullable=True),
        sa.Column("visibility", sa.String(20), nullable=False, server_default="group_only"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "group_id", "iso_week", "weekday", name="uq_day_status_key"),
        sa.CheckConstraint("weekday BETWEEN 1 AND 5", name="ck_day_status_weekday"),
        sa.CheckConstraint(
            "status IN ('Lunchbox','Buying','Home','Away') OR status IS NULL",
            name="ck_day_status_status",
        ),
    )
    op.create_index("ix_day_statuses_user_id", "day_statuses", ["user_id"])
    op.create_index("ix_day_statuses_iso_week", "day_statuses", ["iso_week"])
    op.create_index(
        "uq_day_status_personal_key",
        "day_statuses",
        ["user_id", "iso_week", "weekday"],
        unique=True,
        postgresql_where=sa.text("group_id IS NULL"),
        sqlite_where=sa.text("group_id IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("uq_day_status_personal_key", table_name="day_statuses")
    op.drop_index("ix_day_statuses_iso_week", table_name="day_statuses")
    op.drop_index("ix_day_statuses_user_id", table_name="day_statuses")
    op.drop_table("day_statuses")
    op.drop_table("group_members")
    op.drop_table("groups")
    op.drop_table("users")
