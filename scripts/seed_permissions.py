"""
Seed script to populate the default permission catalog.

Run this script after database initialization to create:
- Default permissions (organization, team, member, invitation, activity, audit)
- Global role-permission grants for owner, admin and member

Safe to run repeatedly, and concurrently with API instances seeding at startup.

Usage:
    python -m scripts.seed_permissions
"""
import asyncio

from orgguard.core.database.engine import AsyncSessionLocal, init_db
from orgguard.features.permissions.catalog import default_catalog, ensure_seeded
from orgguard.utils import get_logger


log = get_logger(__name__)


async def main():
    """Main function to seed permissions and role grants."""
    log.info("Starting permission seeding...")

    # Initialize database tables first
    log.info("Initializing database tables...")
    await init_db()

    catalog = default_catalog()
    async with AsyncSessionLocal() as db:
        try:
            report = await ensure_seeded(db, catalog)
        except Exception as e:
            log.error(f"Error seeding permissions: {e}", exc_info=True)
            raise

    log.info("Permission seeding completed successfully!")
    log.info(
        f"Permissions: {report.permissions_created} created, {report.permissions_existing} existing; "
        f"grants: {report.grants_created} created, {report.grants_existing} existing, "
        f"{report.grants_skipped} skipped"
    )
    log.info("Roles:")
    for role, names in catalog.role_permissions.items():
        log.info(f"  - {role}: {', '.join(names)}")


if __name__ == "__main__":
    asyncio.run(main())
