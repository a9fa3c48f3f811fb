"""Hierarchical record visibility.

Users can see:
1. Records they created (``created_by == user_id``)
2. Records created by their direct and indirect subordinates

Users can modify only their own records unless a call site opts in to
subordinate editing.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, TypeVar
from uuid import UUID

import structlog
from sqlalchemy import Select
from sqlalchemy.orm import InstrumentedAttribute

from orgaccess.core.permissions.hierarchy import OrgHierarchyResolver


logger = structlog.get_logger()

T = TypeVar("T")


def _owner_of(item: Any) -> Any:
    """Return an owned record's ``created_by``, for objects and mappings."""
    if isinstance(item, Mapping):
        return item.get("created_by")
    return getattr(item, "created_by", None)


def filter_by_hierarchical_access(
    items: Iterable[T],
    accessible_user_ids: Iterable[UUID],
) -> list[T]:
    """Keep only items created by one of the accessible users, in order."""
    allowed = set(accessible_user_ids)
    return [item for item in items if _owner_of(item) in allowed]


def has_access_to_item(item: Any, accessible_user_ids: Iterable[UUID]) -> bool:
    """Check if an item was created by one of the accessible users."""
    return _owner_of(item) in set(accessible_user_ids)


def can_modify_item(
    item: Any,
    user_id: UUID,
    allow_subordinate_edit: bool = False,
) -> bool:
    """Check if a user may modify or delete an item.

    Only the creator may, unless ``allow_subordinate_edit`` is set. The
    flag does not check the hierarchy itself; pair it with
    ``has_access_to_item`` when the item may belong to anyone.
    """
    if _owner_of(item) == user_id:
        return True
    return allow_subordinate_edit


def create_hierarchical_predicate(
    accessible_user_ids: Iterable[UUID],
) -> Callable[[Any], bool]:
    """Build a reusable visibility predicate for in-memory filtering."""
    allowed = frozenset(accessible_user_ids)
    return lambda item: _owner_of(item) in allowed


def restrict_to_owners(
    stmt: Select[Any],
    created_by_column: InstrumentedAttribute[Any],
    accessible_user_ids: Sequence[UUID],
) -> Select[Any]:
    """Narrow a query to rows created by the accessible users.

    Usage:
        ids = await access.get_accessible_user_ids(current_user_id)
        stmt = restrict_to_owners(select(Task), Task.created_by, ids)
    """
    return stmt.where(created_by_column.in_(list(accessible_user_ids)))


class HierarchicalAccessFilter:
    """Resolves which users' records a principal may see."""

    def __init__(self, resolver: OrgHierarchyResolver) -> None:
        self.resolver = resolver

    async def get_accessible_user_ids(self, user_id: UUID) -> list[UUID]:
        """Get the user's id plus all subordinate ids.

        Falls back to ``[user_id]`` when the hierarchy cannot be read, so
        any failure, including a dropped connection or a timeout, never
        widens visibility.
        """
        try:
            return await self.resolver.get_accessible_user_ids(user_id)
        except Exception as e:
            logger.exception(
                "accessible_user_ids_failed",
                user_id=str(user_id),
                error=str(e),
            )
            return [user_id]

    async def visible_items(self, user_id: UUID, items: Iterable[T]) -> list[T]:
        """Filter items down to those the user may see."""
        accessible_user_ids = await self.get_accessible_user_ids(user_id)
        return filter_by_hierarchical_access(items, accessible_user_ids)
