"""HOP Huddles role-based access model."""

from hophuddles.capabilities import (
    CAPABILITY_PERMISSIONS,
    CapabilityBundle,
    RoleBasedData,
    assignments_for_role,
    project_capabilities,
    project_role_data,
)
from hophuddles.core.models import (
    AccessLevel,
    AccessScope,
    Assignment,
    Discipline,
    OrgDirectory,
    ResourceContext,
    Role,
    SequenceTarget,
    User,
)
from hophuddles.exceptions import (
    HuddlesError,
    NotAuthenticatedError,
    RoleSwitchError,
    ValidationError,
)
from hophuddles.rbac import ROLE_PERMISSIONS, Permission, effective_permissions, has_permission
from hophuddles.session import RoleSession

__version__ = "0.1.0"

__all__ = [
    "AccessLevel",
    "AccessScope",
    "Assignment",
    "CAPABILITY_PERMISSIONS",
    "CapabilityBundle",
    "Discipline",
    "HuddlesError",
    "NotAuthenticatedError",
    "OrgDirectory",
    "Permission",
    "ROLE_PERMISSIONS",
    "ResourceContext",
    "Role",
    "RoleBasedData",
    "RoleSession",
    "RoleSwitchError",
    "SequenceTarget",
    "User",
    "ValidationError",
    "assignments_for_role",
    "effective_permissions",
    "has_permission",
    "project_capabilities",
    "project_role_data",
]
