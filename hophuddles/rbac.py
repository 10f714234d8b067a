"""Role-Based Access Control for HOP Huddles.

Defines the permission catalogue, the static role -> permissions table,
and the resolver that answers "can these assignments perform P".

The resolver is scope-aware but not instance-aware: it answers "can manage
branches" in general, never "can manage branch #7". Callers that need an
instance check apply scope themselves (see ``hophuddles.scope``).

Roles (by display level, highest first):
    SUPERADMIN          -- System-wide administrative access
    EDUCATOR            -- Full agency access plus huddle authoring
    ADMIN               -- Full agency access, no huddle authoring
    DIRECTOR            -- Branch leader
    CLINICAL_MANAGER    -- Team leader
    BRANCH_MANAGER      -- Read access across a branch
    PRECEPTOR           -- Mentors a team, sees its progress
    FIELD_CLINICIAN     -- Completes assigned huddles
    SCHEDULER / INTAKE_COORDINATOR / LEARNER -- Narrow operational roles

Levels are for display only. Nothing is inherited from rank; every role
lists its permissions explicitly.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from hophuddles.core.models import AccessScope, Assignment, Role, coerce_assignments

logger = logging.getLogger("hophuddles.rbac")


class Permission(StrEnum):
    """Atomic ``resource:action`` rights."""

    AGENCY_CREATE = "agency:create"
    AGENCY_UPDATE = "agency:update"
    AGENCY_DELETE = "agency:delete"
    AGENCY_VIEW = "agency:view"

    BRANCH_CREATE = "branch:create"
    BRANCH_UPDATE = "branch:update"
    BRANCH_DELETE = "branch:delete"
    BRANCH_VIEW = "branch:view"

    TEAM_CREATE = "team:create"
    TEAM_UPDATE = "team:update"
    TEAM_DELETE = "team:delete"
    TEAM_VIEW = "team:view"

    USER_CREATE = "user:create"
    USER_UPDATE = "user:update"
    USER_DELETE = "user:delete"
    USER_VIEW = "user:view"
    USER_ASSIGN = "user:assign"
    USER_ACTIVATE = "user:activate"
    USER_DEACTIVATE = "user:deactivate"

    HUDDLE_CREATE = "huddle:create"
    HUDDLE_UPDATE = "huddle:update"
    HUDDLE_DELETE = "huddle:delete"
    HUDDLE_VIEW = "huddle:view"
    HUDDLE_PUBLISH = "huddle:publish"
    HUDDLE_SCHEDULE = "huddle:schedule"

    PROGRESS_VIEW_OWN = "progress:view:own"
    PROGRESS_VIEW_TEAM = "progress:view:team"
    PROGRESS_VIEW_BRANCH = "progress:view:branch"
    PROGRESS_VIEW_AGENCY = "progress:view:agency"


P = Permission

_USER_ADMINISTRATION = frozenset(
    {
        P.USER_CREATE,
        P.USER_UPDATE,
        P.USER_DELETE,
        P.USER_VIEW,
        P.USER_ASSIGN,
        P.USER_ACTIVATE,
        P.USER_DEACTIVATE,
    }
)
_BRANCH_ADMINISTRATION = frozenset({P.BRANCH_CREATE, P.BRANCH_UPDATE, P.BRANCH_DELETE, P.BRANCH_VIEW})
_TEAM_ADMINISTRATION = frozenset({P.TEAM_CREATE, P.TEAM_UPDATE, P.TEAM_DELETE, P.TEAM_VIEW})

#: Static grant table. Adding a role or permission is a change here only.
ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.SUPERADMIN: frozenset(Permission),
    Role.EDUCATOR: frozenset(
        {
            P.AGENCY_CREATE,
            P.AGENCY_UPDATE,
            P.AGENCY_VIEW,
            *_BRANCH_ADMINISTRATION,
            *_TEAM_ADMINISTRATION,
            *_USER_ADMINISTRATION,
            P.HUDDLE_CREATE,
            P.HUDDLE_UPDATE,
            P.HUDDLE_DELETE,
            P.HUDDLE_VIEW,
            P.HUDDLE_PUBLISH,
            P.HUDDLE_SCHEDULE,
            P.PROGRESS_VIEW_AGENCY,
        }
    ),
    # Same reach as EDUCATOR but may not author huddles or create agencies.
    Role.ADMIN: frozenset(
        {
            P.AGENCY_UPDATE,
            P.AGENCY_VIEW,
            *_BRANCH_ADMINISTRATION,
            *_TEAM_ADMINISTRATION,
            *_USER_ADMINISTRATION,
            P.HUDDLE_UPDATE,
            P.HUDDLE_DELETE,
            P.HUDDLE_VIEW,
            P.HUDDLE_PUBLISH,
            P.HUDDLE_SCHEDULE,
            P.PROGRESS_VIEW_AGENCY,
        }
    ),
    Role.DIRECTOR: frozenset(
        {
            P.BRANCH_VIEW,
            P.BRANCH_UPDATE,
            *_TEAM_ADMINISTRATION,
            P.USER_CREATE,
            P.USER_UPDATE,
            P.USER_VIEW,
            P.USER_ASSIGN,
            P.USER_ACTIVATE,
            P.USER_DEACTIVATE,
            P.HUDDLE_VIEW,
            P.HUDDLE_UPDATE,
            P.PROGRESS_VIEW_BRANCH,
        }
    ),
    Role.CLINICAL_MANAGER: frozenset(
        {
            P.TEAM_VIEW,
            P.TEAM_UPDATE,
            P.USER_UPDATE,
            P.USER_VIEW,
            P.USER_ASSIGN,
            P.USER_ACTIVATE,
            P.USER_DEACTIVATE,
            P.HUDDLE_VIEW,
            P.HUDDLE_UPDATE,
            P.PROGRESS_VIEW_TEAM,
            P.PROGRESS_VIEW_OWN,
        }
    ),
    Role.BRANCH_MANAGER: frozenset(
        {
            P.BRANCH_VIEW,
            P.TEAM_VIEW,
            P.USER_VIEW,
            P.HUDDLE_VIEW,
            P.PROGRESS_VIEW_BRANCH,
            P.PROGRESS_VIEW_OWN,
        }
    ),
    Role.PRECEPTOR: frozenset(
        {P.HUDDLE_VIEW, P.PROGRESS_VIEW_OWN, P.PROGRESS_VIEW_TEAM, P.USER_VIEW}
    ),
    Role.FIELD_CLINICIAN: frozenset({P.HUDDLE_VIEW, P.PROGRESS_VIEW_OWN}),
    Role.SCHEDULER: frozenset(
        {P.HUDDLE_VIEW, P.HUDDLE_SCHEDULE, P.USER_VIEW, P.PROGRESS_VIEW_OWN}
    ),
    Role.INTAKE_COORDINATOR: frozenset({P.HUDDLE_VIEW, P.USER_VIEW, P.PROGRESS_VIEW_OWN}),
    Role.LEARNER: frozenset({P.HUDDLE_VIEW, P.PROGRESS_VIEW_OWN}),
}

#: Organizational level at which each role's grants apply. Only the
#: caller-side scope check reads this; the resolver ignores it.
ROLE_GRANT_SCOPE: dict[Role, AccessScope] = {
    Role.SUPERADMIN: AccessScope.AGENCY,
    Role.EDUCATOR: AccessScope.AGENCY,
    Role.ADMIN: AccessScope.AGENCY,
    Role.DIRECTOR: AccessScope.BRANCH,
    Role.CLINICAL_MANAGER: AccessScope.TEAM,
    Role.BRANCH_MANAGER: AccessScope.BRANCH,
    Role.PRECEPTOR: AccessScope.TEAM,
    Role.FIELD_CLINICIAN: AccessScope.TEAM,
    Role.SCHEDULER: AccessScope.BRANCH,
    Role.INTAKE_COORDINATOR: AccessScope.BRANCH,
    Role.LEARNER: AccessScope.TEAM,
}


@dataclass(frozen=True)
class RoleProfile:
    """Display metadata for a role."""

    label: str
    description: str
    level: int
    is_leader: bool = False


ROLE_PROFILES: dict[Role, RoleProfile] = {
    Role.SUPERADMIN: RoleProfile("Super Administrator", "System-wide administrative access", 11),
    Role.EDUCATOR: RoleProfile("Educator", "Full agency access + huddle management", 10),
    Role.ADMIN: RoleProfile("Administrator", "Full agency access (no huddle creation)", 9),
    Role.DIRECTOR: RoleProfile(
        "Director", "Branch leader with management capabilities", 8, is_leader=True
    ),
    Role.CLINICAL_MANAGER: RoleProfile(
        "Clinical Manager", "Team leader with management capabilities", 7, is_leader=True
    ),
    Role.BRANCH_MANAGER: RoleProfile("Branch Manager", "Read access across a branch", 6),
    Role.PRECEPTOR: RoleProfile("Preceptor", "Mentors clinicians and follows team progress", 4),
    Role.FIELD_CLINICIAN: RoleProfile(
        "Field Clinician", "Access to assigned huddles and personal progress", 3
    ),
    Role.SCHEDULER: RoleProfile("Scheduler", "Schedules huddle delivery for a branch", 2),
    Role.INTAKE_COORDINATOR: RoleProfile(
        "Intake Coordinator", "Onboards staff and follows their progress", 2
    ),
    Role.LEARNER: RoleProfile("Learner", "Completes assigned huddles", 1),
}

#: Roles ordered from highest to lowest display level (ties keep enum order).
ROLE_HIERARCHY: list[Role] = sorted(Role, key=lambda r: -ROLE_PROFILES[r].level)

_NO_GRANTS: frozenset[Permission] = frozenset()


def coerce_permission(value: Permission | str) -> Permission | None:
    """Return the matching Permission, or None for unknown strings."""
    try:
        return Permission(value)
    except ValueError:
        return None


def resolve_roles(assignment: Assignment) -> frozenset[Role]:
    """Union of an assignment's primary role and its role list."""
    return frozenset({assignment.role, *assignment.roles})


def _grants_for(assignment: Assignment) -> frozenset[Permission]:
    grants: set[Permission] = set()
    for role in resolve_roles(assignment):
        grants |= ROLE_PERMISSIONS.get(role, _NO_GRANTS)
    return frozenset(grants)


def has_permission(
    assignments: Iterable[Assignment] | None, permission: Permission | str
) -> bool:
    """Return True when any active assignment holds a role granting *permission*.

    Grants are a pure union across assignments and roles: there is no
    precedence and no explicit deny. Inactive assignments, unknown roles and
    unknown permission strings never match. Never raises.
    """
    pool = [a for a in coerce_assignments(assignments) if a.is_active]
    required = coerce_permission(permission)
    granted = required is not None and any(required in _grants_for(a) for a in pool)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Permission check %s -> %s",
            permission,
            "granted" if granted else "denied",
            extra={
                "permission": str(permission),
                "granted": granted,
                "assignment_count": len(pool),
            },
        )
    return granted


def effective_permissions(assignments: Iterable[Assignment] | None) -> frozenset[Permission]:
    """Every permission granted by the active assignments."""
    grants: set[Permission] = set()
    for assignment in coerce_assignments(assignments):
        if assignment.is_active:
            grants |= _grants_for(assignment)
    return frozenset(grants)


def roles_granting(permission: Permission | str) -> tuple[Role, ...]:
    """Roles whose grant set contains *permission*, highest level first."""
    required = coerce_permission(permission)
    if required is None:
        return ()
    return tuple(r for r in ROLE_HIERARCHY if required in ROLE_PERMISSIONS[r])


def explain_permissions(assignments: Iterable[Assignment] | None) -> list[dict[str, Any]]:
    """Describe what each assignment contributes; logged at DEBUG.

    Intended for support tooling. Inactive assignments are listed with an
    empty grant list so it is visible why they do not count.
    """
    report: list[dict[str, Any]] = []
    for assignment in coerce_assignments(assignments):
        grants = _grants_for(assignment) if assignment.is_active else _NO_GRANTS
        entry = {
            "assignment_id": assignment.assignment_id,
            "agency_id": assignment.agency_id,
            "branch_id": assignment.branch_id,
            "team_id": assignment.team_id,
            "roles": [str(r) for r in assignment.all_roles],
            "access_scope": str(assignment.access_scope),
            "is_active": assignment.is_active,
            "permissions": sorted(str(p) for p in grants),
        }
        logger.debug(
            "Assignment %s grants %d permissions",
            assignment.assignment_id,
            len(grants),
            extra={"user_id": assignment.user_id},
        )
        report.append(entry)
    return report
