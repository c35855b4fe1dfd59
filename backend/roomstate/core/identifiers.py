"""Identifiers — event id generation scoped to a server name.

Invariants:
    - Event ids have the form $<18 alphanumerics>:<server_name>
    - server_name is a hostname, IPv4 or bracketed IPv6 literal, optional :port
    - Invalid server names raise IdentifierError, never produce a malformed id
"""

import re
import secrets
import string

from roomstate.core.domain_types import EventId
from roomstate.core.errors import IdentifierError

EVENT_ID_SIGIL = "$"
EVENT_ID_LOCALPART_LENGTH = 18

_ALPHABET = string.ascii_letters + string.digits
_SERVER_NAME = re.compile(
    r"^(?:\[[0-9A-Fa-f:.]{2,45}\]|[A-Za-z0-9.\-]{1,255})(?::[0-9]{1,5})?$",
)


def is_valid_server_name(server_name: str) -> bool:
    if not server_name or not _SERVER_NAME.match(server_name):
        return False
    _, _, port = server_name.rpartition("]")[2].partition(":")
    return not port or 0 < int(port) <= 65535


def generate_event_id(server_name: str) -> EventId:
    """Return a fresh event id for an event originating on server_name."""
    if not is_valid_server_name(server_name):
        raise IdentifierError(f"Invalid server name '{server_name}'")
    localpart = "".join(
        secrets.choice(_ALPHABET) for _ in range(EVENT_ID_LOCALPART_LENGTH)
    )
    return EventId(f"{EVENT_ID_SIGIL}{localpart}:{server_name}")
