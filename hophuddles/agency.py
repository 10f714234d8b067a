"""Per-agency lookups over a user's assignments.

Only active assignments count anywhere in this module.
"""

from __future__ import annotations

from hophuddles.core.models import AccessScope, Role, User, broadest_scope
from hophuddles.rbac import ROLE_HIERARCHY, resolve_roles

#: Roles that may open the user-management screens of an agency.
USER_MANAGER_ROLES = frozenset(
    {
        Role.EDUCATOR,
        Role.ADMIN,
        Role.DIRECTOR,
        Role.CLINICAL_MANAGER,
        Role.BRANCH_MANAGER,
        Role.INTAKE_COORDINATOR,
    }
)


def is_user_in_agency(user: User, agency_id: int) -> bool:
    return any(a.agency_id == agency_id for a in user.active_assignments)


def primary_agency(user: User) -> tuple[int, str | None] | None:
    """(agency_id, agency_name) of the primary active assignment, or the first active one."""
    active = user.active_assignments
    if not active:
        return None
    chosen = next((a for a in active if a.is_primary), active[0])
    return chosen.agency_id, chosen.agency_name


def roles_in_agency(user: User, agency_id: int) -> tuple[Role, ...]:
    """Roles held in *agency_id*, highest level first."""
    held: set[Role] = set()
    for a in user.active_assignments:
        if a.agency_id == agency_id:
            held |= resolve_roles(a)
    return tuple(r for r in ROLE_HIERARCHY if r in held)


def access_scope_in_agency(user: User, agency_id: int) -> AccessScope | None:
    return broadest_scope(a.access_scope for a in user.active_assignments if a.agency_id == agency_id)


def can_manage_users_in_agency(user: User, agency_id: int) -> bool:
    return any(r in USER_MANAGER_ROLES for r in roles_in_agency(user, agency_id))
