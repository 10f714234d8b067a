"""Tests for the permission table and resolver (hophuddles.rbac)."""

from __future__ import annotations

import logging

import pytest

from hophuddles.core.models import AccessScope, Assignment, Role
from hophuddles.rbac import (
    ROLE_GRANT_SCOPE,
    ROLE_HIERARCHY,
    ROLE_PERMISSIONS,
    ROLE_PROFILES,
    Permission,
    effective_permissions,
    explain_permissions,
    has_permission,
    resolve_roles,
    roles_granting,
)


def _assignment(role: Role, **kwargs) -> Assignment:
    return Assignment(role=role, agency_id=kwargs.pop("agency_id", 1), **kwargs)


# ---------------------------------------------------------------------------
# Static tables
# ---------------------------------------------------------------------------


class TestRoleTables:
    def test_every_role_has_grants(self):
        for role in Role:
            assert role in ROLE_PERMISSIONS, f"{role} missing from ROLE_PERMISSIONS"

    def test_every_role_has_grant_scope_and_profile(self):
        for role in Role:
            assert role in ROLE_GRANT_SCOPE
            assert role in ROLE_PROFILES

    def test_every_permission_is_granted_somewhere(self):
        granted = set().union(*ROLE_PERMISSIONS.values())
        assert granted == set(Permission)

    def test_superadmin_holds_everything(self):
        assert ROLE_PERMISSIONS[Role.SUPERADMIN] == frozenset(Permission)

    def test_admin_cannot_author_or_create_agencies(self):
        admin = ROLE_PERMISSIONS[Role.ADMIN]
        assert Permission.HUDDLE_CREATE not in admin
        assert Permission.AGENCY_CREATE not in admin
        assert Permission.HUDDLE_PUBLISH in admin

    def test_educator_cannot_delete_agency(self):
        assert Permission.AGENCY_DELETE not in ROLE_PERMISSIONS[Role.EDUCATOR]

    def test_no_inheritance_from_rank(self):
        # DIRECTOR outranks CLINICAL_MANAGER but does not get own-progress.
        assert ROLE_PROFILES[Role.DIRECTOR].level > ROLE_PROFILES[Role.CLINICAL_MANAGER].level
        assert Permission.PROGRESS_VIEW_OWN in ROLE_PERMISSIONS[Role.CLINICAL_MANAGER]
        assert Permission.PROGRESS_VIEW_OWN not in ROLE_PERMISSIONS[Role.DIRECTOR]

    def test_hierarchy_order(self):
        assert ROLE_HIERARCHY[0] == Role.SUPERADMIN
        assert ROLE_HIERARCHY[1] == Role.EDUCATOR
        assert ROLE_HIERARCHY[-1] == Role.LEARNER
        assert len(ROLE_HIERARCHY) == len(Role)

    def test_leader_roles(self):
        leaders = {r for r, profile in ROLE_PROFILES.items() if profile.is_leader}
        assert leaders == {Role.DIRECTOR, Role.CLINICAL_MANAGER}

    def test_permission_values_are_resource_action(self):
        for perm in Permission:
            assert ":" in perm.value


# ---------------------------------------------------------------------------
# has_permission
# ---------------------------------------------------------------------------


class TestHasPermission:
    @pytest.mark.parametrize("role", list(Role))
    def test_single_assignment_matches_table(self, role):
        assignments = [_assignment(role)]
        for perm in Permission:
            assert has_permission(assignments, perm) == (perm in ROLE_PERMISSIONS[role])

    def test_union_across_agencies(self):
        # Director in agency A, clinician in agency B.
        assignments = [
            _assignment(Role.DIRECTOR, agency_id=1, branch_id=10),
            _assignment(Role.FIELD_CLINICIAN, agency_id=2, team_id=200),
        ]
        assert has_permission(assignments, Permission.BRANCH_UPDATE) is True
        assert has_permission(assignments, Permission.PROGRESS_VIEW_OWN) is True
        assert has_permission(assignments, Permission.AGENCY_UPDATE) is False

    def test_role_list_contributes(self):
        a = Assignment(role=Role.FIELD_CLINICIAN, roles=[Role.FIELD_CLINICIAN, Role.SCHEDULER])
        assert has_permission([a], Permission.HUDDLE_SCHEDULE) is True

    def test_inactive_assignment_is_ignored(self):
        live = _assignment(Role.LEARNER)
        dormant = _assignment(Role.EDUCATOR, is_active=False)
        assert has_permission([live], Permission.HUDDLE_CREATE) is False
        assert has_permission([live, dormant], Permission.HUDDLE_CREATE) is False
        assert has_permission([dormant], Permission.HUDDLE_VIEW) is False

    def test_adding_inactive_never_changes_result(self):
        base = [_assignment(Role.CLINICAL_MANAGER, team_id=100)]
        extra = base + [_assignment(Role.SUPERADMIN, is_active=False)]
        for perm in Permission:
            assert has_permission(base, perm) == has_permission(extra, perm)

    def test_empty_and_none_deny(self):
        assert has_permission([], Permission.HUDDLE_VIEW) is False
        assert has_permission(None, Permission.HUDDLE_VIEW) is False

    def test_unknown_permission_denied(self):
        assert has_permission([_assignment(Role.SUPERADMIN)], "huddle:teleport") is False

    def test_accepts_plain_string(self):
        assert has_permission([_assignment(Role.EDUCATOR)], "huddle:create") is True

    @pytest.mark.parametrize("junk", [None, "junk", 42, object()])
    def test_malformed_items_match_nothing(self, junk):
        assert has_permission([junk], Permission.HUDDLE_VIEW) is False

    def test_malformed_item_does_not_hide_valid_one(self):
        assignments = [_assignment(Role.EDUCATOR), None, "junk"]
        assert has_permission(assignments, Permission.HUDDLE_CREATE) is True

    def test_camel_case_payload(self):
        payload = {"role": "EDUCATOR", "isActive": True, "accessScope": "AGENCY"}
        assert has_permission([payload], Permission.HUDDLE_CREATE) is True
        assert has_permission([{**payload, "isActive": False}], "huddle:create") is False

    def test_invalid_payload_matches_nothing(self):
        assert has_permission([{"role": "WIZARD"}], Permission.HUDDLE_VIEW) is False
        assert has_permission([{"roles": 5}], Permission.HUDDLE_VIEW) is False

    def test_accepts_generator(self):
        gen = (a for a in [_assignment(Role.ADMIN)])
        assert has_permission(gen, Permission.USER_CREATE) is True

    def test_debug_log_carries_fields(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="hophuddles.rbac"):
            has_permission([_assignment(Role.LEARNER)], Permission.USER_DELETE)
        record = caplog.records[-1]
        assert record.permission == "user:delete"
        assert record.granted is False
        assert record.assignment_count == 1


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestResolveRoles:
    def test_union_of_role_and_roles(self):
        a = Assignment(role=Role.PRECEPTOR, roles=[Role.PRECEPTOR, Role.LEARNER])
        assert resolve_roles(a) == frozenset({Role.PRECEPTOR, Role.LEARNER})


class TestEffectivePermissions:
    def test_union_of_active(self):
        perms = effective_permissions(
            [_assignment(Role.LEARNER), _assignment(Role.SCHEDULER, branch_id=10)]
        )
        assert perms == ROLE_PERMISSIONS[Role.LEARNER] | ROLE_PERMISSIONS[Role.SCHEDULER]

    def test_inactive_excluded(self):
        assert effective_permissions([_assignment(Role.ADMIN, is_active=False)]) == frozenset()

    def test_none(self):
        assert effective_permissions(None) == frozenset()

    def test_skips_malformed(self):
        perms = effective_permissions([None, {"role": "LEARNER"}, "junk"])
        assert perms == ROLE_PERMISSIONS[Role.LEARNER]


class TestRolesGranting:
    def test_agency_delete_only_superadmin(self):
        assert roles_granting(Permission.AGENCY_DELETE) == (Role.SUPERADMIN,)

    def test_huddle_create(self):
        assert roles_granting("huddle:create") == (Role.SUPERADMIN, Role.EDUCATOR)

    def test_ordered_by_level(self):
        roles = roles_granting(Permission.HUDDLE_VIEW)
        levels = [ROLE_PROFILES[r].level for r in roles]
        assert levels == sorted(levels, reverse=True)
        assert len(roles) == len(Role)

    def test_unknown_permission(self):
        assert roles_granting("bogus") == ()


class TestExplainPermissions:
    def test_report_shape(self):
        a = Assignment(
            assignment_id=5, agency_id=1, branch_id=10, role=Role.DIRECTOR,
            access_scope=AccessScope.BRANCH,
        )
        [entry] = explain_permissions([a])
        assert entry["assignment_id"] == 5
        assert entry["roles"] == ["DIRECTOR"]
        assert entry["access_scope"] == "BRANCH"
        assert entry["is_active"] is True
        assert "branch:update" in entry["permissions"]
        assert entry["permissions"] == sorted(entry["permissions"])

    def test_inactive_has_no_permissions(self):
        [entry] = explain_permissions([_assignment(Role.EDUCATOR, is_active=False)])
        assert entry["is_active"] is False
        assert entry["permissions"] == []

    def test_empty(self):
        assert explain_permissions(None) == []

    def test_malformed_items_left_out(self):
        report = explain_permissions([None, {"role": "DIRECTOR", "branchId": 10}])
        assert len(report) == 1
        assert report[0]["access_scope"] == "BRANCH"
