"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - RoomId, UserId, EventId wrap the protocol's sigil-prefixed strings
      (!room:server, @user:server, $event:server) — never pass bare str in domain logic
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: values are the wire strings, so they serialize to JSON unchanged
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

RoomId = NewType("RoomId", str)
UserId = NewType("UserId", str)
EventId = NewType("EventId", str)


# ─── Enums ───────────────────────────────────────────────────────

class MembershipState(str, Enum):
    """Relationship of a user to a room — maps to DB `membership` column."""
    JOIN = "join"
    INVITE = "invite"
    LEAVE = "leave"
    BAN = "ban"
    KNOCK = "knock"


class JoinRule(str, Enum):
    """Room policy governing who may create a membership."""
    PUBLIC = "public"
    INVITE = "invite"
    KNOCK = "knock"
    PRIVATE = "private"
    RESTRICTED = "restricted"
    KNOCK_RESTRICTED = "knock_restricted"


class EventType(str, Enum):
    """State event types this core constructs or reads."""
    ROOM_MEMBER = "m.room.member"
    ROOM_JOIN_RULES = "m.room.join_rules"
