"""Shared fixtures for HOP Huddles tests."""

from __future__ import annotations

import pytest

from hophuddles.core.models import (
    AccessScope,
    Assignment,
    Branch,
    Discipline,
    OrgDirectory,
    Role,
    Team,
    User,
)


@pytest.fixture
def org() -> OrgDirectory:
    """Agency 1 with two branches; branch 10 has two teams, branch 11 one."""
    return OrgDirectory(
        branches=(
            Branch(branch_id=10, agency_id=1, name="North"),
            Branch(branch_id=11, agency_id=1, name="South"),
            Branch(branch_id=20, agency_id=2, name="Elsewhere"),
        ),
        teams=(
            Team(team_id=100, branch_id=10, name="North RN"),
            Team(team_id=101, branch_id=10, name="North PT"),
            Team(team_id=110, branch_id=11, name="South RN"),
            Team(team_id=200, branch_id=20, name="Elsewhere RN"),
        ),
    )


@pytest.fixture
def educator_assignment() -> Assignment:
    return Assignment(
        assignment_id=1,
        user_id=1,
        agency_id=1,
        role=Role.EDUCATOR,
        access_scope=AccessScope.AGENCY,
        is_primary=True,
    )


@pytest.fixture
def clinician_assignment() -> Assignment:
    return Assignment(
        assignment_id=2,
        user_id=2,
        agency_id=1,
        branch_id=10,
        team_id=100,
        role=Role.FIELD_CLINICIAN,
        discipline=Discipline.RN,
        access_scope=AccessScope.TEAM,
    )


@pytest.fixture
def manager_assignment() -> Assignment:
    return Assignment(
        assignment_id=3,
        user_id=7,
        agency_id=1,
        branch_id=10,
        team_id=100,
        role=Role.CLINICAL_MANAGER,
        access_scope=AccessScope.TEAM,
        is_primary=True,
        is_leader=True,
    )


@pytest.fixture
def director_assignment() -> Assignment:
    return Assignment(
        assignment_id=4,
        user_id=7,
        agency_id=1,
        branch_id=11,
        role=Role.DIRECTOR,
        access_scope=AccessScope.BRANCH,
        is_leader=True,
    )


@pytest.fixture
def multi_role_user(manager_assignment, director_assignment) -> User:
    """Clinical manager in branch 10 who also directs branch 11."""
    return User(
        user_id=7,
        email="leader@example.org",
        name="Dana Leader",
        assignments=(manager_assignment, director_assignment),
    )
