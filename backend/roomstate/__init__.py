"""roomstate: membership projection and idempotency cache for a chat-room homeserver.

Submodules are imported explicitly; the package root only carries the version.
"""

__version__ = "0.1.0"
