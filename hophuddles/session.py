"""Session state: the signed-in user and the role they are acting as.

The resolver and projector never read ambient state; ``RoleSession`` is
the single container that holds the active role and threads it into them
on every call. Switching is only allowed to a role held by one of the
user's active assignments.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from hophuddles.capabilities import (
    CapabilityBundle,
    RoleBasedData,
    project_capabilities,
    project_role_data,
)
from hophuddles.config import Settings, settings as default_settings
from hophuddles.core.models import (
    AccessScope,
    Assignment,
    OrgDirectory,
    Role,
    User,
    coerce_role,
)
from hophuddles.exceptions import NotAuthenticatedError, RoleSwitchError
from hophuddles.rbac import ROLE_HIERARCHY, ROLE_PROFILES, resolve_roles

logger = logging.getLogger("hophuddles.session")
_audit_logger = logging.getLogger("hophuddles.audit")


def default_role_for(user: User | None) -> Role | None:
    """Role of the primary active assignment, else of the first active one."""
    if user is None:
        return None
    active = user.active_assignments
    if not active:
        return None
    primary = next((a for a in active if a.is_primary), active[0])
    return primary.role


class RoleSession:
    """Holds the user and their active role for the lifetime of a session."""

    def __init__(
        self,
        user: User | None,
        active_role: Role | str | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.user = user
        self._settings = settings or default_settings
        self._active_role: Role | None = default_role_for(user)
        if active_role is not None:
            self.switch_role(active_role)

    # -- state -------------------------------------------------------------

    @property
    def active_role(self) -> Role | None:
        return self._active_role

    @property
    def assignments(self) -> tuple[Assignment, ...]:
        return self.user.assignments if self.user is not None else ()

    @property
    def available_roles(self) -> tuple[Role, ...]:
        """Roles held across active assignments, highest level first."""
        held: set[Role] = set()
        for assignment in self.assignments:
            if assignment.is_active:
                held |= resolve_roles(assignment)
        return tuple(r for r in ROLE_HIERARCHY if r in held)

    # -- switching ---------------------------------------------------------

    def can_switch_to_role(self, role: Role | str) -> bool:
        target = coerce_role(role)
        return target is not None and target in self.available_roles

    def switch_role(self, role: Role | str) -> CapabilityBundle:
        """Make *role* the active role and return the recomputed bundle.

        Raises:
            NotAuthenticatedError: no user is signed in.
            RoleSwitchError: *role* is not held by any active assignment.
        """
        if self.user is None:
            raise NotAuthenticatedError("Cannot switch role without a signed-in user")

        if not self.can_switch_to_role(role):
            available = [str(r) for r in self.available_roles]
            if self._settings.audit_role_switches:
                _audit_logger.warning(
                    "Role switch rejected for user %s: %s not held",
                    self.user.user_id,
                    role,
                    extra={
                        "user_id": self.user.user_id,
                        "active_role": str(self._active_role) if self._active_role else None,
                        "requested_role": str(role),
                    },
                )
            raise RoleSwitchError(str(role), available)

        previous = self._active_role
        self._active_role = Role(role)
        logger.info(
            "Active role switched from %s to %s",
            previous,
            self._active_role,
            extra={"user_id": self.user.user_id, "active_role": str(self._active_role)},
        )
        return self.capabilities

    # -- projections -------------------------------------------------------

    @property
    def capabilities(self) -> CapabilityBundle:
        return project_capabilities(self._active_role, self.assignments)

    def role_data(self, org: OrgDirectory | None = None) -> RoleBasedData:
        return project_role_data(self._active_role, self.assignments, org)

    @property
    def access_scope(self) -> AccessScope | None:
        return self.capabilities.access_scope

    def is_role(self, role: Role | str) -> bool:
        return self._active_role is not None and self._active_role == coerce_role(role)

    def has_any_role(self, roles: Iterable[Role | str]) -> bool:
        return self._active_role is not None and any(self.is_role(r) for r in roles)

    def role_display_info(self) -> dict[str, Any] | None:
        if self._active_role is None:
            return None
        profile = ROLE_PROFILES[self._active_role]
        scope = self.access_scope
        return {
            "role": str(self._active_role),
            "label": profile.label,
            "level": profile.level,
            "access_scope": str(scope) if scope else None,
            "has_multiple_roles": len(self.available_roles) > 1,
        }
