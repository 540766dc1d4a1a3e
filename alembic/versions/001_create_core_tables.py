"""Create core tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates accounts (users, userends), the owned resources and the
       per-device mirror tables.
How:   Parent references are indexed UUID columns without foreign keys;
       optional parents may point at rows that do not exist.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _owned_columns() -> list:
    return [
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    ]


# (table, parent reference column or None, extra columns)
OWNED_TABLES = [
    ("devices", None, lambda: [
        sa.Column("identifier", sa.String(255), nullable=False, server_default=""),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        sa.Column("ip", sa.String(64), nullable=False, server_default=""),
        sa.Column("mdns", sa.String(255), nullable=False, server_default=""),
    ]),
    ("feeds", None, lambda: [
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
    ]),
    ("boxes", "device_id", lambda: [
        sa.Column("device_box", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        sa.Column("settings", sa.Text(), nullable=False, server_default="{}"),
    ]),
    ("plants", "box_id", lambda: [
        sa.Column("feed_id", sa.Uuid(), nullable=True),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        sa.Column("settings", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
    ]),
    ("timelapses", "plant_id", lambda: [
        sa.Column("type", sa.String(64), nullable=False, server_default=""),
        sa.Column("settings", sa.Text(), nullable=False, server_default="{}"),
    ]),
    ("feedentries", "feed_id", lambda: [
        sa.Column("date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("etype", sa.String(64), nullable=False, server_default=""),
        sa.Column("params", sa.Text(), nullable=False, server_default="{}"),
    ]),
    ("feedmedias", "feed_entry_id", lambda: [
        sa.Column("file_path", sa.String(1024), nullable=False, server_default=""),
        sa.Column("thumbnail_path", sa.String(1024), nullable=False, server_default=""),
        sa.Column("params", sa.Text(), nullable=False, server_default="{}"),
    ]),
    ("plantsharings", "feed_entry_id", lambda: [
        sa.Column("to_user_id", sa.Uuid(), nullable=True),
    ]),
]

# (mirror table, mirrored object column)
MIRROR_TABLES = [
    ("userend_boxes", "box_id"),
    ("userend_plants", "plant_id"),
    ("userend_timelapses", "timelapse_id"),
    ("userend_devices", "device_id"),
    ("userend_feeds", "feed_id"),
    ("userend_feedentries", "feed_entry_id"),
    ("userend_feedmedias", "feed_media_id"),
]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("nickname", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_nickname", "users", ["nickname"])

    op.create_table(
        "userends",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_userends_user_id", "userends", ["user_id"])

    for table, parent_column, extra in OWNED_TABLES:
        columns = _owned_columns()
        if parent_column is not None:
            columns.append(sa.Column(parent_column, sa.Uuid(), nullable=True))
        op.create_table(table, *columns, *extra(), sa.PrimaryKeyConstraint("id"))
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])
        if parent_column is not None:
            op.create_index(f"ix_{table}_{parent_column}", table, [parent_column])

    op.create_index("ix_plants_feed_id", "plants", ["feed_id"])
    op.create_index("ix_plants_is_public", "plants", ["is_public"])

    for table, object_column in MIRROR_TABLES:
        op.create_table(
            table,
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("userend_id", sa.Uuid(), nullable=False),
            sa.Column(object_column, sa.Uuid(), nullable=False),
            sa.Column("dirty", sa.Boolean(), nullable=False, server_default=sa.true()),
            _timestamp("created_at"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(f"ix_{table}_userend_id", table, ["userend_id"])
        op.create_index(f"ix_{table}_{object_column}", table, [object_column])


def downgrade() -> None:
    """Drops every table; all data is lost."""
    for table, _ in reversed(MIRROR_TABLES):
        op.drop_table(table)
    for table, _, _ in reversed(OWNED_TABLES):
        op.drop_table(table)
    op.drop_table("userends")
    op.drop_table("users")
