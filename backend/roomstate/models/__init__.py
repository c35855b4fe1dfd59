"""ORM Models — SQLAlchemy declarative models for persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - room_memberships.event_id references events.event_id

Design Decisions:
    - One file per entity
    - All models imported here so metadata.create_all and Alembic see every table
"""

from roomstate.models.event import Event  # noqa: F401
from roomstate.models.profile import UserProfile  # noqa: F401
from roomstate.models.room_membership import RoomMembership  # noqa: F401
from roomstate.models.transaction import Transaction  # noqa: F401
