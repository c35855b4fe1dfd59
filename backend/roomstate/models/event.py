"""Event ORM — append-only log of room state events.

Invariants:
    - Rows are only ever inserted
    - ordering increases with insertion; the latest state event for
      (room_id, type, state_key) is the one with the highest ordering
    - event_id is globally unique

Design Decisions:
    - BIGINT surrogate key (ordering) with a unique event_id: gives a total
      order independent of clock resolution
    - content/unsigned as JSON: payload shape is validated on read (schemas/events.py)
"""

from sqlalchemy import BigInteger, Index, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from roomstate.db.base import Base


class Event(Base):
    """Persisted state event."""
    __tablename__ = "events"
    __table_args__ = (
        Index("ix_events_room_type_state_key", "room_id", "type", "state_key"),
    )

    # BIGINT on PostgreSQL; SQLite only autoincrements an INTEGER primary key
    ordering: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True, autoincrement=True,
    )
    event_id: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    room_id: Mapped[str] = mapped_column(String(255), nullable=False)
    event_type: Mapped[str] = mapped_column("type", String(255), nullable=False)
    state_key: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    sender: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    unsigned: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    origin_server_ts: Mapped[int] = mapped_column(BigInteger, nullable=False)
