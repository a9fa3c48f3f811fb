"""OrgAccess: role-based hierarchical access control."""

__version__ = "0.1.0"
