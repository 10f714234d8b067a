"""Caller-side scope restriction on top of the permission resolver.

``has_permission`` ignores where an assignment sits in the
organization. Screens that act on a specific agency, branch or team use
these helpers to narrow a grant to that instance.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from hophuddles.core.models import (
    AccessScope,
    Assignment,
    OrgDirectory,
    ResourceContext,
    coerce_assignments,
)
from hophuddles.rbac import (
    ROLE_GRANT_SCOPE,
    ROLE_PERMISSIONS,
    Permission,
    coerce_permission,
    has_permission,
    resolve_roles,
)

logger = logging.getLogger("hophuddles.scope")

#: Grants that are not about an existing instance, so no scope applies.
UNSCOPED_PERMISSIONS: frozenset[Permission] = frozenset({Permission.AGENCY_CREATE})


def _same_agency(assignment: Assignment, context: ResourceContext) -> bool:
    return context.agency_id is None or context.agency_id == assignment.agency_id


def _same_branch(assignment: Assignment, context: ResourceContext) -> bool:
    return context.branch_id is None or context.branch_id == assignment.branch_id


def _same_team(assignment: Assignment, context: ResourceContext) -> bool:
    return context.team_id is None or context.team_id == assignment.team_id


def _grant_applies(
    grant_scope: AccessScope, assignment: Assignment, context: ResourceContext
) -> bool:
    """Wider assignments reach narrower resources; never the other way round."""
    user_scope = assignment.access_scope
    if grant_scope == AccessScope.AGENCY:
        return _same_agency(assignment, context)
    if grant_scope == AccessScope.BRANCH:
        if user_scope == AccessScope.AGENCY:
            return _same_agency(assignment, context)
        if user_scope == AccessScope.BRANCH:
            return _same_branch(assignment, context)
        return False
    if user_scope == AccessScope.AGENCY:
        return _same_agency(assignment, context)
    if user_scope == AccessScope.BRANCH:
        return _same_branch(assignment, context)
    return _same_team(assignment, context)


def has_permission_in_context(
    assignments: Iterable[Assignment] | None,
    permission: Permission | str,
    context: ResourceContext | None = None,
) -> bool:
    """Like ``has_permission`` but the grant must reach *context*.

    With no context this is exactly ``has_permission``.
    """
    if context is None:
        return has_permission(assignments, permission)
    required = coerce_permission(permission)
    if required is None:
        return False

    for assignment in coerce_assignments(assignments):
        if not assignment.is_active:
            continue
        for role in resolve_roles(assignment):
            if required not in ROLE_PERMISSIONS.get(role, frozenset()):
                continue
            if required in UNSCOPED_PERMISSIONS:
                return True
            grant_scope = ROLE_GRANT_SCOPE.get(role, AccessScope.TEAM)
            if _grant_applies(grant_scope, assignment, context):
                return True

    logger.debug(
        "Scoped check %s denied for %s",
        permission,
        context.model_dump(exclude_none=True),
        extra={"permission": str(permission), "granted": False},
    )
    return False


@dataclass(frozen=True)
class DataContext:
    """Ids of the organizational units a set of assignments can see."""

    agency_ids: tuple[int, ...] = ()
    branch_ids: tuple[int, ...] = ()
    team_ids: tuple[int, ...] = ()


def build_data_context(
    assignments: Iterable[Assignment] | None, org: OrgDirectory | None = None
) -> DataContext:
    """Collect visible agency/branch/team ids from active assignments.

    Without an ``OrgDirectory`` only the ids written on the assignments are
    known; with one, AGENCY and BRANCH scopes expand to everything below them.
    """
    agencies: set[int] = set()
    branches: set[int] = set()
    teams: set[int] = set()

    for a in coerce_assignments(assignments):
        if not a.is_active:
            continue
        agencies.add(a.agency_id)
        if a.access_scope == AccessScope.AGENCY and org is not None:
            for branch_id in org.branches_in_agency(a.agency_id):
                branches.add(branch_id)
                teams.update(org.teams_in_branch(branch_id))
        if a.access_scope in (AccessScope.AGENCY, AccessScope.BRANCH) and a.branch_id is not None:
            branches.add(a.branch_id)
            if org is not None:
                teams.update(org.teams_in_branch(a.branch_id))
        if a.team_id is not None:
            teams.add(a.team_id)

    return DataContext(
        agency_ids=tuple(sorted(agencies)),
        branch_ids=tuple(sorted(branches)),
        team_ids=tuple(sorted(teams)),
    )


def can_access_resource(
    access_scope: AccessScope | None,
    resource_type: AccessScope,
    resource_id: int | None = None,
    data_context: DataContext | None = None,
) -> bool:
    """Whether an actor at *access_scope* may open a resource of *resource_type*."""
    if access_scope is None:
        return False
    data_context = data_context or DataContext()

    if resource_type == AccessScope.AGENCY:
        return access_scope == AccessScope.AGENCY
    if resource_type == AccessScope.BRANCH:
        if access_scope == AccessScope.AGENCY:
            return True
        return access_scope == AccessScope.BRANCH and (
            resource_id is None or resource_id in data_context.branch_ids
        )
    if access_scope in (AccessScope.AGENCY, AccessScope.BRANCH):
        return True
    return resource_id is None or resource_id in data_context.team_ids
