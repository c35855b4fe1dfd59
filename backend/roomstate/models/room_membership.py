"""RoomMembership ORM — fast-lookup projection of the latest m.room.member event.

Invariants:
    - Primary key (room_id, user_id): at most one row per pair
    - event_id always names the latest m.room.member event for the pair
    - created_at is set once at insert and never updated
    - Rows are never deleted; leave/ban are new events plus an updated row

Design Decisions:
    - Composite primary key instead of a surrogate id: the database itself
      rejects a second row for the pair, under any isolation level
    - Index on user_id for find_by_user
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from roomstate.db.base import Base


class RoomMembership(Base):
    """Current membership of user_id in room_id."""
    __tablename__ = "room_memberships"

    room_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(255), primary_key=True, index=True,
    )
    event_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("events.event_id"), nullable=False,
    )
    # The user whose action produced the current membership
    sender: Mapped[str] = mapped_column(String(255), nullable=False)
    membership: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return (
            f"<RoomMembership(room_id={self.room_id!r}, user_id={self.user_id!r}, "
            f"membership={self.membership!r})>"
        )
