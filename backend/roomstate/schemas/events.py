"""Event Schemas — typed views of m.room.member and m.room.join_rules payloads.

Invariants:
    - Parsing failures surface as SerializationError, never as pydantic errors
    - Unknown content keys are preserved (extra="allow") but never required

Design Decisions:
    - Parsed from core StateEvent records, so any EventLog implementation
      can feed them
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from roomstate.core.domain_types import EventType, JoinRule, MembershipState
from roomstate.core.errors import ErrorContext, SerializationError
from roomstate.core.member_events import StateEvent


class MemberEventContent(BaseModel):
    """Content of an m.room.member event."""
    model_config = ConfigDict(extra="allow")

    membership: MembershipState
    displayname: str | None = None
    avatar_url: str | None = None


class MemberEvent(BaseModel):
    """An m.room.member state event."""
    event_id: str
    type: Literal["m.room.member"] = EventType.ROOM_MEMBER.value
    room_id: str
    sender: str
    state_key: str
    content: MemberEventContent
    prev_content: MemberEventContent | None = None
    origin_server_ts: int
    unsigned: dict[str, Any] | None = None


class JoinRulesEventContent(BaseModel):
    """Content of an m.room.join_rules event."""
    model_config = ConfigDict(extra="allow")

    join_rule: JoinRule


def member_event_from_state_event(event: StateEvent) -> MemberEvent:
    """Parse a logged event into a MemberEvent."""
    unsigned = event.unsigned if isinstance(event.unsigned, dict) else {}
    try:
        return MemberEvent(
            event_id=event.event_id,
            type=event.type_value,
            room_id=event.room_id,
            sender=event.sender,
            state_key=event.state_key,
            content=event.content,
            prev_content=unsigned.get("prev_content"),
            origin_server_ts=event.origin_server_ts,
            unsigned=event.unsigned,
        )
    except ValidationError as e:
        raise SerializationError(
            f"Event '{event.event_id}' is not a valid member event: {e.error_count()} error(s)",
            ErrorContext(room_id=event.room_id, event_id=event.event_id),
        ) from e


def join_rule_from_state_event(event: StateEvent) -> JoinRule:
    """Extract the join rule from a logged m.room.join_rules event."""
    try:
        return JoinRulesEventContent.model_validate(event.content).join_rule
    except ValidationError as e:
        raise SerializationError(
            f"Event '{event.event_id}' has invalid join rules content",
            ErrorContext(room_id=event.room_id, event_id=event.event_id),
        ) from e
