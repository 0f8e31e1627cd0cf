"""Caller identity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """Authenticated caller. Admin identities bypass every role and permission check."""

    user_id: str
    username: str | None = None
    is_admin: bool = False
