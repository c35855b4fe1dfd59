"""Transaction ORM — write-once cache of an endpoint's serialized response.

Invariants:
    - Primary key is (path, access_token)
    - Rows are never updated or deleted; response is opaque
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from roomstate.db.base import Base


class Transaction(Base):
    """Cached response for a (path, access_token) pair."""
    __tablename__ = "transactions"

    # Full endpoint path, including the client's transaction id
    path: Mapped[str] = mapped_column(String(1024), primary_key=True)
    access_token: Mapped[str] = mapped_column(String(255), primary_key=True)
    response: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Transaction(path={self.path!r})>"
