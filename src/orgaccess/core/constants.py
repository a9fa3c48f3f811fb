"""Application-wide constants.

Permission vocabulary shared by the evaluator, the seeds and the API.
"""

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_ROLE_NAME_LENGTH = 100
MAX_PERMISSION_MODULE_LENGTH = 100
MAX_PERMISSION_ACTION_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 255

# Explicit super-admin marker
SUPER_ADMIN_MODULE = "system"
SUPER_ADMIN_ACTION = "admin"

# Legacy-seeded roles hold this bundle instead of system:admin
ADMIN_PRIVILEGE_BUNDLE: frozenset[tuple[str, str]] = frozenset(
    {
        ("users", "assign-role"),
        ("permissions", "assign"),
        ("roles", "create"),
        ("settings", "update"),
    }
)

# Reported for every module when the principal is a super-admin
CANONICAL_ACTIONS: tuple[str, ...] = ("create", "read", "update", "delete", "view", "edit")

# Each action maps to every action that satisfies it
ACTION_ALIASES: dict[str, tuple[str, ...]] = {
    "view": ("view", "read"),
    "read": ("read", "view"),
    "edit": ("edit", "update"),
    "update": ("update", "edit"),
}

# Upper bound on nodes visited by a single subordinate traversal
DEFAULT_HIERARCHY_MAX_NODES = 10_000
