"""Role capability projection.

Turns (active role, assignments) into the full set of UI-facing decisions
in one pass, so no caller re-derives role logic on its own:

1. access scope       -- broadest scope among the active role's assignments
2. capability flags   -- each one an OR over a fixed permission set (see
                         ``CAPABILITY_PERMISSIONS``), evaluated by the resolver
3. access level       -- role identity first, view capabilities second
4. feature flags      -- fixed role-membership tests, allowed to overlap
5. navigation         -- base items, role additions, clinician hides last

Projection is pure and deterministic: no I/O, no clock, no cache. Missing
input degrades to ``CapabilityBundle.safe_default()``; nothing here raises.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from hophuddles.core.models import (
    AccessLevel,
    AccessScope,
    Assignment,
    DashboardView,
    OrgDirectory,
    Role,
    broadest_scope,
    coerce_assignments,
    coerce_role,
)
from hophuddles.rbac import Permission, has_permission, resolve_roles
from hophuddles.scope import build_data_context

P = Permission

#: Every capability flag and the permissions that, OR-ed, decide it.
CAPABILITY_PERMISSIONS: dict[str, tuple[Permission, ...]] = {
    "can_manage_agency": (P.AGENCY_UPDATE,),
    "can_manage_branches": (P.BRANCH_CREATE, P.BRANCH_UPDATE),
    "can_manage_teams": (P.TEAM_CREATE, P.TEAM_UPDATE),
    "can_manage_users": (P.USER_CREATE, P.USER_UPDATE),
    "can_manage_huddles": (P.HUDDLE_CREATE, P.HUDDLE_UPDATE),
    "can_create_sequences": (P.HUDDLE_CREATE,),
    "can_publish_sequences": (P.HUDDLE_PUBLISH,),
    "can_schedule_sequences": (P.HUDDLE_SCHEDULE,),
    # Assessments are authored as part of a sequence.
    "can_create_assessments": (P.HUDDLE_CREATE,),
    "can_view_agency_analytics": (P.PROGRESS_VIEW_AGENCY,),
    "can_view_branch_analytics": (P.PROGRESS_VIEW_BRANCH,),
    "can_view_team_analytics": (P.PROGRESS_VIEW_TEAM,),
    "can_view_user_progress": (
        P.PROGRESS_VIEW_AGENCY,
        P.PROGRESS_VIEW_BRANCH,
        P.PROGRESS_VIEW_TEAM,
    ),
    "can_view_own_progress": (P.PROGRESS_VIEW_OWN,),
}

_VIEW_CAPABILITIES = ("can_view_user_progress", "can_view_own_progress")

FULL_ACCESS_ROLES = frozenset({Role.EDUCATOR, Role.SUPERADMIN})
MANAGEMENT_ROLES = frozenset({Role.ADMIN, Role.DIRECTOR, Role.CLINICAL_MANAGER})

EDUCATOR_FEATURE_ROLES = frozenset({Role.EDUCATOR})
ADMIN_FEATURE_ROLES = frozenset({Role.ADMIN, Role.EDUCATOR, Role.SUPERADMIN})
MANAGER_FEATURE_ROLES = frozenset(
    {Role.DIRECTOR, Role.CLINICAL_MANAGER, Role.ADMIN, Role.EDUCATOR}
)
CLINICIAN_FEATURE_ROLES = frozenset({Role.FIELD_CLINICIAN})

BASE_NAV_ITEMS = ("dashboard", "profile", "settings")
ADMINISTRATION_NAV_ITEMS = ("agency-management", "branches", "teams", "users", "analytics")
AUTHORING_NAV_ITEMS = ("sequence-management", "huddle-creation", "assessments")
MANAGER_NAV_ITEMS = ("team-management", "progress-tracking")
DIRECTOR_NAV_ITEMS = ("branch-management",)
CLINICIAN_NAV_ITEMS = ("my-huddles", "my-progress", "assessments-todo")
CLINICIAN_HIDDEN_NAV_ITEMS = ("management", "analytics", "administration")


@dataclass(frozen=True)
class CapabilityBundle:
    """Read-only snapshot of what the active role may see and do."""

    can_manage_agency: bool = False
    can_manage_branches: bool = False
    can_manage_teams: bool = False
    can_manage_users: bool = False
    can_manage_huddles: bool = False
    can_create_sequences: bool = False
    can_publish_sequences: bool = False
    can_schedule_sequences: bool = False
    can_create_assessments: bool = False
    can_view_agency_analytics: bool = False
    can_view_branch_analytics: bool = False
    can_view_team_analytics: bool = False
    can_view_user_progress: bool = False
    can_view_own_progress: bool = False

    access_scope: AccessScope | None = None
    access_level: AccessLevel = AccessLevel.LIMITED

    show_admin_features: bool = False
    show_educator_features: bool = False
    show_manager_features: bool = False
    show_clinician_features: bool = False

    enabled_nav_items: tuple[str, ...] = ()
    hidden_nav_items: tuple[str, ...] = ()

    @classmethod
    def safe_default(cls) -> CapabilityBundle:
        """Deny everything: all flags false, ``LIMITED`` access, no scope."""
        return cls()

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["access_scope"] = str(self.access_scope) if self.access_scope else None
        data["access_level"] = str(self.access_level)
        data["enabled_nav_items"] = list(self.enabled_nav_items)
        data["hidden_nav_items"] = list(self.hidden_nav_items)
        return data


def assignments_for_role(
    assignments: Iterable[Assignment] | None, role: Role | str | None
) -> tuple[Assignment, ...]:
    """Active assignments holding *role*, each narrowed to that role alone.

    This is what "acting as" a role means: a multi-role assignment only
    contributes the active role's grants.
    """
    active_role = coerce_role(role)
    if active_role is None:
        return ()
    return tuple(
        a.model_copy(update={"role": active_role, "roles": (active_role,)})
        for a in coerce_assignments(assignments)
        if a.is_active and active_role in resolve_roles(a)
    )


def _access_level(role: Role, flags: dict[str, bool]) -> AccessLevel:
    if role in FULL_ACCESS_ROLES:
        return AccessLevel.FULL
    if role in MANAGEMENT_ROLES:
        return AccessLevel.MANAGEMENT
    if any(flags[name] for name in _VIEW_CAPABILITIES):
        return AccessLevel.VIEW_ONLY
    return AccessLevel.LIMITED


def _navigation(
    role: Role, *, educator: bool, admin: bool, manager: bool, clinician: bool
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    enabled: list[str] = list(BASE_NAV_ITEMS)
    hidden: list[str] = []

    if educator or admin:
        enabled.extend(ADMINISTRATION_NAV_ITEMS)
    if educator:
        enabled.extend(AUTHORING_NAV_ITEMS)
    if manager and not admin:
        enabled.extend(MANAGER_NAV_ITEMS)
        if role == Role.DIRECTOR:
            enabled.extend(DIRECTOR_NAV_ITEMS)
    if clinician:
        enabled.extend(CLINICIAN_NAV_ITEMS)
        hidden.extend(CLINICIAN_HIDDEN_NAV_ITEMS)

    # Hides are applied last so they win over anything added above.
    enabled_items = tuple(dict.fromkeys(i for i in enabled if i not in hidden))
    return enabled_items, tuple(dict.fromkeys(hidden))


def project_capabilities(
    active_role: Role | str | None, assignments: Iterable[Assignment] | None
) -> CapabilityBundle:
    """Compute the capability bundle for *active_role*.

    Returns the safe default when there is no role, no assignments, or no
    active assignment that actually holds the role.
    """
    role = coerce_role(active_role)
    view = assignments_for_role(assignments, role)
    if role is None or not view:
        return CapabilityBundle.safe_default()

    flags = {
        name: any(has_permission(view, p) for p in perms)
        for name, perms in CAPABILITY_PERMISSIONS.items()
    }

    educator = role in EDUCATOR_FEATURE_ROLES
    admin = role in ADMIN_FEATURE_ROLES
    manager = role in MANAGER_FEATURE_ROLES
    clinician = role in CLINICIAN_FEATURE_ROLES
    enabled, hidden = _navigation(
        role, educator=educator, admin=admin, manager=manager, clinician=clinician
    )

    return CapabilityBundle(
        **flags,
        access_scope=broadest_scope(a.access_scope for a in view),
        access_level=_access_level(role, flags),
        show_admin_features=admin,
        show_educator_features=educator,
        show_manager_features=manager,
        show_clinician_features=clinician,
        enabled_nav_items=enabled,
        hidden_nav_items=hidden,
    )


# ---------------------------------------------------------------------------
# Role-based data: dashboard variant, suggested actions, visible ids
# ---------------------------------------------------------------------------

_DASHBOARD_VIEWS: dict[Role, DashboardView] = {
    Role.SUPERADMIN: DashboardView.ADMIN,
    Role.EDUCATOR: DashboardView.EDUCATOR,
    Role.ADMIN: DashboardView.ADMIN,
    Role.DIRECTOR: DashboardView.MANAGER,
    Role.CLINICAL_MANAGER: DashboardView.MANAGER,
}

#: (primary actions, quick actions) per role; roles not listed get none.
_ROLE_ACTIONS: dict[Role, tuple[tuple[str, ...], tuple[str, ...]]] = {
    Role.EDUCATOR: (
        ("create-sequence", "manage-huddles", "view-analytics"),
        ("create-huddle", "schedule-sequence", "create-assessment"),
    ),
    Role.ADMIN: (
        ("manage-users", "manage-branches", "view-analytics"),
        ("add-user", "create-branch", "create-team"),
    ),
    Role.DIRECTOR: (
        ("manage-branch", "manage-teams", "track-progress"),
        ("add-team-member", "assign-huddles", "view-branch-analytics"),
    ),
    Role.CLINICAL_MANAGER: (
        ("manage-team", "track-progress", "assign-huddles"),
        ("add-team-member", "view-team-progress", "schedule-huddles"),
    ),
    Role.FIELD_CLINICIAN: (
        ("complete-huddles", "view-progress", "take-assessments"),
        ("continue-learning", "view-certificates", "update-profile"),
    ),
}


@dataclass(frozen=True)
class RoleBasedData:
    default_dashboard_view: DashboardView = DashboardView.CLINICIAN
    primary_actions: tuple[str, ...] = ()
    quick_actions: tuple[str, ...] = ()
    accessible_agency_ids: tuple[int, ...] = ()
    accessible_branch_ids: tuple[int, ...] = ()
    accessible_team_ids: tuple[int, ...] = ()


def project_role_data(
    active_role: Role | str | None,
    assignments: Iterable[Assignment] | None,
    org: OrgDirectory | None = None,
) -> RoleBasedData:
    """Dashboard variant, suggested actions and visible ids for *active_role*."""
    role = coerce_role(active_role)
    view = assignments_for_role(assignments, role)
    if role is None or not view:
        return RoleBasedData()

    primary, quick = _ROLE_ACTIONS.get(role, ((), ()))
    context = build_data_context(view, org)
    return RoleBasedData(
        default_dashboard_view=_DASHBOARD_VIEWS.get(role, DashboardView.CLINICIAN),
        primary_actions=primary,
        quick_actions=quick,
        accessible_agency_ids=context.agency_ids,
        accessible_branch_ids=context.branch_ids,
        accessible_team_ids=context.team_ids,
    )
