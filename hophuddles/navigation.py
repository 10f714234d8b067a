"""Sidebar navigation filtered by permission.

Each sidebar context lists its items; an item with a permission is shown
only when the resolver grants it. Coming-soon items are always shown so
users can see what is on the way.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from hophuddles.config import settings
from hophuddles.core.models import Assignment, coerce_assignments
from hophuddles.exceptions import ValidationError
from hophuddles.rbac import Permission, has_permission


@dataclass(frozen=True)
class NavItem:
    name: str
    href: str
    permission: Permission | None = None
    coming_soon: bool = False


NAVIGATION: dict[str, tuple[NavItem, ...]] = {
    "main-platform": (
        NavItem("Platform Home", "/main-platform"),
        NavItem("HOP Huddles", "/hop-huddles-dashboard", Permission.HUDDLE_VIEW),
        NavItem("HOP Care", "/hop-care-dashboard", coming_soon=True),
        NavItem("HOP Analytics", "/hop-analytics-dashboard", coming_soon=True),
        NavItem("HOP Wellness", "/hop-wellness-dashboard", coming_soon=True),
    ),
    "hop-huddles": (
        NavItem("Huddles Dashboard", "/hop-huddles-dashboard"),
        NavItem("Sequences", "/sequences", Permission.HUDDLE_VIEW),
        NavItem("Users", "/users", Permission.USER_VIEW),
        NavItem("Branches", "/branches", Permission.BRANCH_VIEW),
        NavItem("Teams", "/teams", Permission.TEAM_VIEW),
        NavItem("Progress", "/progress", Permission.PROGRESS_VIEW_OWN),
    ),
    "legacy": (
        NavItem("Main Platform", "/main-platform"),
        NavItem("Dashboard", "/hud-dash"),
        NavItem("Agencies", "/agencies", Permission.AGENCY_VIEW),
        NavItem("Branches", "/branches", Permission.BRANCH_VIEW),
        NavItem("Teams", "/teams", Permission.TEAM_VIEW),
        NavItem("Users", "/users", Permission.USER_VIEW),
        NavItem("Sequences", "/sequences", Permission.HUDDLE_VIEW),
        NavItem("Progress", "/progress", Permission.PROGRESS_VIEW_AGENCY),
    ),
}


def visible_navigation(
    assignments: Iterable[Assignment] | None, context: str | None = None
) -> list[NavItem]:
    """Items of the *context* sidebar the assignments may see.

    Raises:
        ValidationError: *context* is not a known sidebar.
    """
    name = (context or settings.default_nav_context).lower()
    if name not in NAVIGATION:
        raise ValidationError(f"Unknown navigation context '{context}'")

    pool = coerce_assignments(assignments)
    return [
        item
        for item in NAVIGATION[name]
        if item.coming_soon or item.permission is None or has_permission(pool, item.permission)
    ]
