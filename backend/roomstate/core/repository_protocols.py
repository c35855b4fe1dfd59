"""Boundary Protocols — contracts between the projection and its collaborators.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - The event log and profile lookup are consumed only through these Protocols
    - Implementations that take part in a unit of work must share its session

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO; the pure decisions in
      member_events.py never await
"""

from collections.abc import Collection
from typing import Protocol

from roomstate.core.domain_types import EventId, EventType, RoomId, UserId
from roomstate.core.member_events import Profile, StateEvent


class EventLog(Protocol):
    """Append-only authoritative store of state events."""
    async def append(self, event: StateEvent) -> EventId: ...
    async def find_latest_state_event(
        self, room_id: RoomId, event_type: EventType, state_key: str = "",
    ) -> StateEvent | None: ...
    async def get_events(
        self, event_ids: Collection[EventId],
    ) -> dict[EventId, StateEvent]: ...


class ProfileLookup(Protocol):
    """Read-only source of user display data."""
    async def find_by_user(self, user_id: UserId) -> Profile | None: ...
