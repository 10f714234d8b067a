"""Audience targeting for huddle sequences.

A sequence carries zero or more ``SequenceTarget`` entries. A learner can
open a huddle when any target matches one of their active assignments;
a sequence with no targets is open to everyone.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from hophuddles.core.models import (
    AccessScope,
    Assignment,
    Discipline,
    OrgDirectory,
    Role,
    SequenceTarget,
    TargetType,
    coerce_assignments,
)
from hophuddles.rbac import resolve_roles


def _as_id(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def _disciplines(assignment: Assignment) -> set[str]:
    found = {str(d) for d in assignment.disciplines}
    if assignment.discipline is not None:
        found.add(str(assignment.discipline))
    return found


def _matches(target: SequenceTarget, a: Assignment, org: OrgDirectory | None) -> bool:
    if target.target_type == TargetType.DISCIPLINE:
        return target.target_value in _disciplines(a)
    if target.target_type == TargetType.ROLE:
        return target.target_value in {str(r) for r in resolve_roles(a)}

    target_id = _as_id(target.target_value)
    if target_id is None:
        return False
    if target.target_type == TargetType.BRANCH:
        return a.branch_id == target_id or a.access_scope == AccessScope.AGENCY
    if target.target_type == TargetType.TEAM:
        if a.team_id == target_id or a.access_scope == AccessScope.AGENCY:
            return True
        if a.access_scope == AccessScope.BRANCH and org is not None:
            branch_id = org.branch_for_team(target_id)
            return branch_id is not None and branch_id == a.branch_id
    return False


def can_access_huddle(
    assignments: Iterable[Assignment] | None,
    targets: Sequence[SequenceTarget] | None,
    org: OrgDirectory | None = None,
) -> bool:
    """True when the sequence is untargeted or any target matches an active assignment."""
    if not targets:
        return True
    active = [a for a in coerce_assignments(assignments) if a.is_active]
    return any(_matches(t, a, org) for t in targets for a in active)


def is_user_targeted_for_sequence(
    assignments: Iterable[Assignment] | None, targets: Sequence[SequenceTarget] | None
) -> bool:
    """Discipline targets and role targets must each be empty or matched."""
    targets = targets or ()
    active = [a for a in coerce_assignments(assignments) if a.is_active]

    wanted_disciplines = {
        t.target_value for t in targets if t.target_type == TargetType.DISCIPLINE
    }
    wanted_roles = {t.target_value for t in targets if t.target_type == TargetType.ROLE}

    held_disciplines: set[str] = set()
    held_roles: set[str] = set()
    for a in active:
        held_disciplines |= _disciplines(a)
        held_roles |= {str(r) for r in resolve_roles(a)}

    discipline_ok = not wanted_disciplines or bool(wanted_disciplines & held_disciplines)
    role_ok = not wanted_roles or bool(wanted_roles & held_roles)
    return discipline_ok and role_ok


def targets_for(
    disciplines: Iterable[Discipline | str] = (), roles: Iterable[Role | str] = ()
) -> list[SequenceTarget]:
    """Build DISCIPLINE then ROLE targets, as the sequence editor submits them."""
    built = [
        SequenceTarget(target_type=TargetType.DISCIPLINE, target_value=str(Discipline(d)))
        for d in disciplines
    ]
    built.extend(
        SequenceTarget(target_type=TargetType.ROLE, target_value=str(Role(r))) for r in roles
    )
    return built
