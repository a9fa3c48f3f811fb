"""Permission system for role-based hierarchical access control."""

from orgaccess.core.permissions.access import (
    HierarchicalAccessFilter,
    can_modify_item,
    create_hierarchical_predicate,
    filter_by_hierarchical_access,
    has_access_to_item,
    restrict_to_owners,
)
from orgaccess.core.permissions.assignments import RoleAssignmentStore
from orgaccess.core.permissions.catalog import PermissionCatalog
from orgaccess.core.permissions.decorators import (
    require_all_permissions,
    require_any_permission,
    require_permission,
)
from orgaccess.core.permissions.evaluator import (
    PermissionContext,
    PermissionEvaluator,
    PermissionMap,
    action_aliases,
    get_module_permissions,
    has_module_access,
    has_permission,
    is_super_admin,
    map_permissions_by_module,
)
from orgaccess.core.permissions.hierarchy import OrgHierarchyResolver
from orgaccess.core.permissions.models import Permission, Role, RolePermission, UserRole


__all__ = [
    # Hierarchy
    "HierarchicalAccessFilter",
    "OrgHierarchyResolver",
    # Models
    "Permission",
    # Stores
    "PermissionCatalog",
    # Evaluation
    "PermissionContext",
    "PermissionEvaluator",
    "PermissionMap",
    "Role",
    "RoleAssignmentStore",
    "RolePermission",
    "UserRole",
    "action_aliases",
    "can_modify_item",
    "create_hierarchical_predicate",
    "filter_by_hierarchical_access",
    "get_module_permissions",
    "has_access_to_item",
    "has_module_access",
    "has_permission",
    "is_super_admin",
    "map_permissions_by_module",
    # Decorators
    "require_all_permissions",
    "require_any_permission",
    "require_permission",
    "restrict_to_owners",
]
