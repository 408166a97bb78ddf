"""Create an admin account.

Usage:
    python -m content_api.auth.seed_admin EMAIL PASSWORD
"""

import argparse
import asyncio
import logging

from content_api.auth.admin_repository import AdminRepository
from content_api.auth.security import hash_password
from content_api.mongodb.client import get_mongodb_client
from content_api.mongodb.schemas import AdminDocument

logger = logging.getLogger(__name__)


async def seed_admin(repo: AdminRepository, email: str, password: str) -> AdminDocument:
    """Create the admin unless one with ``email`` already exists."""
    existing = await repo.get_by_email(email)
    if existing is not None:
        logger.info("[admin=%s] %s already exists", existing.id, existing.email)
        return existing
    admin = await repo.create_admin(email, hash_password(password))
    logger.info("[admin=%s] Created %s", admin.id, admin.email)
    return admin


async def _run(email: str, password: str) -> None:
    try:
        await seed_admin(AdminRepository.create(), email, password)
    finally:
        await get_mongodb_client().close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("email")
    parser.add_argument("password")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    asyncio.run(_run(args.email, args.password))


if __name__ == "__main__":
    main()
