"""Custom exception hierarchy for the HOP Huddles access model.

The permission resolver and capability projector are total functions and
never raise. These errors exist for the seams around them: the role
session and navigation lookups.
"""

from __future__ import annotations


class HuddlesError(Exception):
    """Base exception for all HOP Huddles errors."""

    error_type: str = "internal_error"

    def __init__(self, message: str = "An internal error occurred") -> None:
        self.message = message
        super().__init__(message)


class ValidationError(HuddlesError):
    """Input validation failure beyond Pydantic constraints."""

    error_type = "validation_error"


class NotAuthenticatedError(HuddlesError):
    """An operation needs a signed-in user but the session has none."""

    error_type = "not_authenticated"


class RoleSwitchError(HuddlesError):
    """Requested active role is not held by any active assignment."""

    error_type = "role_switch_denied"

    def __init__(self, requested_role: str, available_roles: list[str] | None = None) -> None:
        self.requested_role = requested_role
        self.available_roles = list(available_roles or [])
        held = ", ".join(self.available_roles) or "none"
        super().__init__(f"Cannot switch to role '{requested_role}' (available: {held})")
