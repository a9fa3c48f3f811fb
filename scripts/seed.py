#!/usr/bin/env python
"""
Seed the default permission catalog and roles.
"""

import argparse
import asyncio
import sys

from sqlalchemy import select


# Add src to path for imports
sys.path.insert(0, "src")

from orgaccess.core.database import async_session_factory, init_db
from orgaccess.core.permissions import PermissionCatalog, RoleAssignmentStore
from orgaccess.core.permissions.seeds import seed_defaults
from orgaccess.modules.users.models import User


async def seed_default() -> None:
    """Create the default permissions and roles."""
    await init_db()
    async with async_session_factory() as session:
        created = await seed_defaults(session)
        await session.commit()
        print(
            f"Seeded {created['permissions']} permissions and {created['roles']} roles"
        )


async def grant_super_admin(email: str) -> None:
    """Give an existing user the Super Admin role."""
    await init_db()
    async with async_session_factory() as session:
        await seed_defaults(session)

        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            print(f"No user with email {email}")
            sys.exit(1)

        role = await PermissionCatalog(session).get_role_by_name("Super Admin")
        await RoleAssignmentStore(session).assign_role_to_user(user.id, role.id, assigned_by=None)
        await session.commit()
        print(f"Granted Super Admin to {user.email}")


async def main(scenario: str, email: str | None) -> None:
    """Run the seeding based on scenario."""
    if scenario == "default":
        await seed_default()
    elif scenario == "super-admin":
        if not email:
            print("--email is required for the super-admin scenario")
            sys.exit(1)
        await grant_super_admin(email)
    else:
        print(f"Unknown scenario: {scenario}")
        print("Available scenarios: default, super-admin")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the access-control catalog")
    parser.add_argument(
        "--scenario",
        "-s",
        default="default",
        help="Seed scenario to run (default, super-admin)",
    )
    parser.add_argument("--email", "-e", help="User email for the super-admin scenario")
    args = parser.parse_args()

    asyncio.run(main(args.scenario, args.email))
