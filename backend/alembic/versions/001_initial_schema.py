"""Initial schema — events, profiles, room_memberships, transactions.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column(
            "ordering", sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True, autoincrement=True,
        ),
        sa.Column("event_id", sa.String(255), nullable=False, unique=True),
        sa.Column("room_id", sa.String(255), nullable=False),
        sa.Column("type", sa.String(255), nullable=False),
        sa.Column("state_key", sa.String(255), nullable=False, server_default=""),
        sa.Column("sender", sa.String(255), nullable=False),
        sa.Column("content", sa.JSON, nullable=False),
        sa.Column("unsigned", sa.JSON, nullable=True),
        sa.Column("origin_server_ts", sa.BigInteger, nullable=False),
    )
    op.create_index(
        "ix_events_room_type_state_key", "events",
        ["room_id", "type", "state_key"],
    )

    op.create_table(
        "profiles",
        sa.Column("user_id", sa.String(255), primary_key=True),
        sa.Column("displayname", sa.Text, nullable=True),
        sa.Column("avatar_url", sa.Text, nullable=True),
    )

    op.create_table(
        "room_memberships",
        sa.Column("room_id", sa.String(255), primary_key=True),
        sa.Column("user_id", sa.String(255), primary_key=True),
        sa.Column(
            "event_id", sa.String(255),
            sa.ForeignKey("events.event_id"), nullable=False,
        ),
        sa.Column("sender", sa.String(255), nullable=False),
        sa.Column("membership", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_room_memberships_user_id", "room_memberships", ["user_id"],
    )

    op.create_table(
        "transactions",
        sa.Column("path", sa.String(1024), primary_key=True),
        sa.Column("access_token", sa.String(255), primary_key=True),
        sa.Column("response", sa.Text, nullable=False),
    )


def downgrade() -> None:
    op.drop_table("transactions")
    op.drop_index("ix_room_memberships_user_id", table_name="room_memberships")
    op.drop_table("room_memberships")
    op.drop_table("profiles")
    op.drop_index("ix_events_room_type_state_key", table_name="events")
    op.drop_table("events")
