"""
Create the bootstrap administrator if it does not exist yet.

Runs on application startup; can also be run by hand with env set:
  ADMIN_USERNAME=admin ADMIN_PASSWORD=... python -m staffpanel.db.seed_admin
"""
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from staffpanel.auth.models import User
from staffpanel.auth.security import hash_password_async
from staffpanel.auth.services import get_user_by_username
from staffpanel.core.config import settings
from staffpanel.db.session import AsyncSessionLocal, create_tables

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_NAME = "Admin"


async def seed_admin(db: AsyncSession) -> bool:
    """Returns True if a user was created."""
    username = settings.admin_username
    password = settings.admin_password
    if not username or not password:
        logger.info("ADMIN_USERNAME/ADMIN_PASSWORD not set; skipping admin bootstrap")
        return False

    if await get_user_by_username(db, username):
        return False

    db.add(
        User(
            username=username,
            password_hash=await hash_password_async(password),
            email=settings.admin_email,
            name=DEFAULT_ADMIN_NAME,
            is_admin=True,
            is_approved=True,
            avatar=None,
            role_id=None,
        )
    )
    await db.commit()
    logger.info("Created admin user %r", username)
    return True


async def main() -> None:
    await create_tables()
    async with AsyncSessionLocal() as db:
        try:
            await seed_admin(db)
        except Exception:
            await db.rollback()
            logger.exception("Admin bootstrap failed")
            raise


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    asyncio.run(main())
