"""Membership Schemas — input to MembershipProjection.create.

Invariants:
    - room_id starts with '!', user_id and sender start with '@'
    - membership is one of the MembershipState values
"""

from pydantic import BaseModel, ConfigDict, field_validator

from roomstate.core.domain_types import MembershipState


def _require_sigil(value: str, sigil: str, kind: str) -> str:
    if not value.startswith(sigil) or ":" not in value:
        raise ValueError(f"{kind} must look like '{sigil}localpart:server'")
    return value


class RoomMembershipOptions(BaseModel):
    """Requested membership of user_id in room_id, acted on by sender."""
    model_config = ConfigDict(frozen=True)

    room_id: str
    user_id: str
    sender: str
    membership: MembershipState

    @field_validator("room_id")
    @classmethod
    def check_room_id(cls, v: str) -> str:
        return _require_sigil(v, "!", "room_id")

    @field_validator("user_id", "sender")
    @classmethod
    def check_user_id(cls, v: str) -> str:
        return _require_sigil(v, "@", "user_id")
