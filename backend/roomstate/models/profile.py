"""UserProfile ORM — display name and avatar, read by the membership projection.

Invariants:
    - One row per user_id
    - This package only reads profiles; profile writes belong elsewhere
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from roomstate.db.base import Base


class UserProfile(Base):
    """Profile entity for a local user."""
    __tablename__ = "profiles"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    displayname: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
