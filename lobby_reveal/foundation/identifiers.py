"""ID generation for records and subscriptions."""

from __future__ import annotations

import secrets
from uuid import UUID, uuid4

_LOBBY_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def new_id() -> UUID:
    """Generate a new random UUID v4."""
    return uuid4()


def new_lobby_code(length: int = 6) -> str:
    """Short, unambiguous join code (no 0/O or 1/I)."""
    return "".join(secrets.choice(_LOBBY_ALPHABET) for _ in range(length))
