"""Member Events — pure construction of m.room.member events and join authorization.

Invariants:
    - state_key of a member event is the affected user's id
    - content always carries membership; displayname/avatar_url only when known
    - prev_content (when given) is recorded under unsigned, never in content
    - Authorization decision depends only on (join_rule, user_id, sender)

Design Decisions:
    - StateEvent is a plain dataclass: services/ decide how it is persisted,
      core/ only decides what it says
"""

import time
from dataclasses import dataclass, field
from typing import Any

from roomstate.core.domain_types import (
    EventId, EventType, JoinRule, MembershipState, RoomId, UserId,
)
from roomstate.core.errors import ErrorContext, SerializationError


@dataclass(frozen=True)
class Profile:
    """Display data for a user; both fields may be absent."""
    displayname: str | None = None
    avatar_url: str | None = None


@dataclass
class StateEvent:
    """A state event as appended to, or read back from, the event log."""
    event_id: EventId
    room_id: RoomId
    event_type: EventType | str
    state_key: str
    sender: UserId
    content: dict[str, Any]
    unsigned: dict[str, Any] | None = None
    origin_server_ts: int = field(default_factory=lambda: int(time.time() * 1000))

    @property
    def type_value(self) -> str:
        return getattr(self.event_type, "value", self.event_type)


def parse_membership(value: str, context: ErrorContext | None = None) -> MembershipState:
    """Parse a stored membership string, raising SerializationError on unknown values."""
    try:
        return MembershipState(value)
    except ValueError as e:
        raise SerializationError(
            f"Unknown membership value '{value}'", context,
        ) from e


def is_join_authorized(join_rule: JoinRule, user_id: UserId, sender: UserId) -> bool:
    """Only the acting user may create their own membership in an invite-only room."""
    if join_rule == JoinRule.INVITE:
        return user_id == sender
    return True


def member_event_content(
    membership: MembershipState, profile: Profile | None,
) -> dict[str, Any]:
    content: dict[str, Any] = {"membership": membership.value}
    if profile is not None:
        if profile.displayname is not None:
            content["displayname"] = profile.displayname
        if profile.avatar_url is not None:
            content["avatar_url"] = profile.avatar_url
    return content


def build_member_event(
    event_id: EventId,
    room_id: RoomId,
    user_id: UserId,
    sender: UserId,
    membership: MembershipState,
    profile: Profile | None = None,
    prev_content: dict[str, Any] | None = None,
) -> StateEvent:
    """Build the m.room.member event recording user_id's membership in room_id."""
    return StateEvent(
        event_id=event_id,
        room_id=room_id,
        event_type=EventType.ROOM_MEMBER,
        state_key=user_id,
        sender=sender,
        content=member_event_content(membership, profile),
        unsigned={"prev_content": prev_content} if prev_content is not None else None,
    )
