"""Domain models for the HOP Huddles access model.

- Assignment: one user's binding to an agency/branch/team with roles and disciplines
- User: the signed-in person and their assignments
- OrgDirectory: read-only branch/team tree used to widen scope lookups
- SequenceTarget: audience target attached to a huddle sequence
- ResourceContext: the instance a caller-side scope check is about
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger("hophuddles.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Role(StrEnum):
    """Job functions a user can hold within an agency."""

    SUPERADMIN = "SUPERADMIN"
    EDUCATOR = "EDUCATOR"
    ADMIN = "ADMIN"
    DIRECTOR = "DIRECTOR"
    CLINICAL_MANAGER = "CLINICAL_MANAGER"
    BRANCH_MANAGER = "BRANCH_MANAGER"
    PRECEPTOR = "PRECEPTOR"
    FIELD_CLINICIAN = "FIELD_CLINICIAN"
    SCHEDULER = "SCHEDULER"
    INTAKE_COORDINATOR = "INTAKE_COORDINATOR"
    LEARNER = "LEARNER"


def coerce_role(value: Role | str | None) -> Role | None:
    """Return the matching Role, or None for missing or unknown names."""
    if value is None:
        return None
    try:
        return Role(value)
    except ValueError:
        return None


class Discipline(StrEnum):
    RN = "RN"
    PT = "PT"
    OT = "OT"
    SLP = "SLP"
    LPN = "LPN"
    HHA = "HHA"
    MSW = "MSW"
    OTHER = "OTHER"


class AccessScope(StrEnum):
    """How far an assignment's visibility reaches."""

    AGENCY = "AGENCY"
    BRANCH = "BRANCH"
    TEAM = "TEAM"

    @property
    def breadth(self) -> int:
        return _SCOPE_BREADTH[self]


_SCOPE_BREADTH: dict[AccessScope, int] = {
    AccessScope.AGENCY: 3,
    AccessScope.BRANCH: 2,
    AccessScope.TEAM: 1,
}


class AccessLevel(StrEnum):
    FULL = "FULL"
    MANAGEMENT = "MANAGEMENT"
    VIEW_ONLY = "VIEW_ONLY"
    LIMITED = "LIMITED"


class DashboardView(StrEnum):
    EDUCATOR = "EDUCATOR"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    CLINICIAN = "CLINICIAN"


class TargetType(StrEnum):
    DISCIPLINE = "DISCIPLINE"
    ROLE = "ROLE"
    BRANCH = "BRANCH"
    TEAM = "TEAM"


def broadest_scope(scopes: Iterable[AccessScope]) -> AccessScope | None:
    """Return the widest scope present (AGENCY > BRANCH > TEAM), or None."""
    widest: AccessScope | None = None
    for scope in scopes:
        if widest is None or scope.breadth > widest.breadth:
            widest = scope
    return widest


# ---------------------------------------------------------------------------
# Base model
# ---------------------------------------------------------------------------


class _FrozenModel(BaseModel):
    """Immutable model accepting both snake_case and the store's camelCase keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


def _pick(data: dict[str, Any], name: str) -> Any:
    value = data.get(name)
    if value is None:
        value = data.get(to_camel(name))
    return value


# ---------------------------------------------------------------------------
# Assignment
# ---------------------------------------------------------------------------


class Assignment(_FrozenModel):
    """Binding of one user to one organizational scope.

    ``role`` is always an element of ``roles`` (and ``discipline`` of
    ``disciplines`` when set); a payload that only carries one of the pair
    is completed at construction, and a contradicting pair is rejected.
    """

    assignment_id: int = 0
    user_id: int = 0
    agency_id: int = 0
    agency_name: str | None = None
    branch_id: int | None = None
    team_id: int | None = None
    role: Role
    roles: tuple[Role, ...] = ()
    discipline: Discipline | None = None
    disciplines: tuple[Discipline, ...] = ()
    is_primary: bool = False
    is_active: bool = True
    access_scope: AccessScope
    is_leader: bool = False

    @model_validator(mode="before")
    @classmethod
    def _complete_pairs(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        role, roles = data.get("role"), data.get("roles") or ()
        if role is None and isinstance(roles, (list, tuple)) and roles:
            data["role"] = roles[0]
        elif role is not None and not roles:
            data["roles"] = (role,)

        discipline, disciplines = data.get("discipline"), data.get("disciplines") or ()
        if discipline is None and isinstance(disciplines, (list, tuple)) and disciplines:
            data["discipline"] = disciplines[0]
        elif discipline is not None and not disciplines:
            data["disciplines"] = (discipline,)

        # Narrowest scope implied by the ids when the store leaves it out.
        if _pick(data, "access_scope") is None:
            if _pick(data, "team_id") is not None:
                data["access_scope"] = AccessScope.TEAM
            elif _pick(data, "branch_id") is not None:
                data["access_scope"] = AccessScope.BRANCH
            else:
                data["access_scope"] = AccessScope.AGENCY
        return data

    @model_validator(mode="after")
    def _check_pairs(self) -> Assignment:
        if self.role not in self.roles:
            msg = f"role '{self.role}' must be one of roles {[str(r) for r in self.roles]}"
            raise ValueError(msg)
        if self.discipline is not None and self.discipline not in self.disciplines:
            msg = (
                f"discipline '{self.discipline}' must be one of disciplines "
                f"{[str(d) for d in self.disciplines]}"
            )
            raise ValueError(msg)
        return self

    @property
    def all_roles(self) -> tuple[Role, ...]:
        """Roles without duplicates, in the order given."""
        return tuple(dict.fromkeys(self.roles))


def coerce_assignments(items: Iterable[Any] | None) -> list[Assignment]:
    """Normalise a caller-supplied assignment list.

    Assignment instances are kept and mappings (snake_case or camelCase) are
    validated into one. Anything else, or a mapping that fails validation,
    is dropped so it matches nothing.
    """
    pool: list[Assignment] = []
    for item in items or ():
        if isinstance(item, Assignment):
            pool.append(item)
        elif isinstance(item, Mapping):
            try:
                pool.append(Assignment.model_validate(dict(item)))
            except ValidationError as exc:
                logger.debug("Dropping invalid assignment payload: %d errors", exc.error_count())
        else:
            logger.debug("Dropping non-assignment item of type %s", type(item).__name__)
    return pool


class User(_FrozenModel):
    user_id: int
    email: str = ""
    name: str = ""
    assignments: tuple[Assignment, ...] = ()

    @property
    def active_assignments(self) -> tuple[Assignment, ...]:
        return tuple(a for a in self.assignments if a.is_active)


# ---------------------------------------------------------------------------
# Organization tree
# ---------------------------------------------------------------------------


class Branch(_FrozenModel):
    branch_id: int
    agency_id: int
    name: str = ""


class Team(_FrozenModel):
    team_id: int
    branch_id: int
    name: str = ""


class OrgDirectory(_FrozenModel):
    """Read-only view of an agency's branches and teams."""

    branches: tuple[Branch, ...] = ()
    teams: tuple[Team, ...] = ()

    def branch_for_team(self, team_id: int) -> int | None:
        for team in self.teams:
            if team.team_id == team_id:
                return team.branch_id
        return None

    def branches_in_agency(self, agency_id: int) -> list[int]:
        return [b.branch_id for b in self.branches if b.agency_id == agency_id]

    def teams_in_branch(self, branch_id: int) -> list[int]:
        return [t.team_id for t in self.teams if t.branch_id == branch_id]


# ---------------------------------------------------------------------------
# Targeting and scope checks
# ---------------------------------------------------------------------------


class SequenceTarget(_FrozenModel):
    """Audience target on a huddle sequence (e.g. DISCIPLINE=RN, TEAM=12)."""

    target_type: TargetType
    target_value: str
    target_display_name: str | None = None

    @field_validator("target_value", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v


class ResourceContext(_FrozenModel):
    """Identifies the agency/branch/team a scope-aware check is about."""

    agency_id: int | None = None
    branch_id: int | None = None
    team_id: int | None = None
