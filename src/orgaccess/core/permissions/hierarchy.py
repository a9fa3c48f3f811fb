"""Org-chart resolution over the manager-link forest.

Each user points at most one manager through ``manager_id``. Traversals
are breadth-first with one query per level and a visited set, so corrupt
data containing a reporting cycle still terminates. Cycles are logged as
integrity faults and never raised.
"""

from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgaccess.config import settings
from orgaccess.modules.users.models import User


logger = structlog.get_logger()


class OrgHierarchyResolver:
    """Computes subordinate sets from the live manager links.

    Nothing is cached; every call reads the current snapshot.
    """

    def __init__(self, session: AsyncSession, max_nodes: int | None = None) -> None:
        self.session = session
        self.max_nodes = settings.hierarchy_max_nodes if max_nodes is None else max_nodes

    async def get_direct_subordinates(self, user_id: UUID) -> list[User]:
        """Get all users whose manager is ``user_id``."""
        stmt = select(User).where(User.manager_id == user_id).order_by(User.full_name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_all_subordinates(self, user_id: UUID) -> list[User]:
        """Get every direct and indirect subordinate of a user.

        Args:
            user_id: The manager at the root of the traversal

        Returns:
            Subordinates in breadth-first order, never including ``user_id``
        """
        visited: set[UUID] = {user_id}
        subordinates: list[User] = []
        frontier: list[UUID] = [user_id]

        while frontier:
            stmt = select(User).where(User.manager_id.in_(frontier)).order_by(User.full_name)
            result = await self.session.execute(stmt)

            next_frontier: list[UUID] = []
            for user in result.scalars():
                if user.id in visited:
                    logger.warning(
                        "manager_cycle_detected",
                        root_user_id=str(user_id),
                        user_id=str(user.id),
                        manager_id=str(user.manager_id),
                    )
                    continue

                if len(subordinates) >= self.max_nodes:
                    logger.warning(
                        "hierarchy_traversal_truncated",
                        root_user_id=str(user_id),
                        max_nodes=self.max_nodes,
                    )
                    return subordinates

                visited.add(user.id)
                subordinates.append(user)
                next_frontier.append(user.id)

            frontier = next_frontier

        return subordinates

    async def get_accessible_user_ids(self, user_id: UUID) -> list[UUID]:
        """Get the user's own id followed by all subordinate ids."""
        subordinates = await self.get_all_subordinates(user_id)
        return [user_id, *(sub.id for sub in subordinates if sub.id != user_id)]

    async def get_manager_chain(self, user_id: UUID) -> list[User]:
        """Get the user's managers from the direct manager up to the root."""
        chain: list[User] = []
        visited: set[UUID] = {user_id}

        user = await self.session.get(User, user_id)
        while user is not None and user.manager_id is not None:
            if user.manager_id in visited:
                logger.warning(
                    "manager_cycle_detected",
                    root_user_id=str(user_id),
                    user_id=str(user.id),
                    manager_id=str(user.manager_id),
                )
                break

            visited.add(user.manager_id)
            user = await self.session.get(User, user.manager_id)
            if user is not None:
                chain.append(user)

        return chain

    async def is_subordinate(self, manager_id: UUID, user_id: UUID) -> bool:
        """Check whether ``user_id`` reports, directly or not, to ``manager_id``."""
        if manager_id == user_id:
            return False
        chain = await self.get_manager_chain(user_id)
        return any(manager.id == manager_id for manager in chain)
