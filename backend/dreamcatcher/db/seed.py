from __future__ import annotations

import logging
import secrets
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from dreamcatcher.db.base import Base
from dreamcatcher.models import AccessKey, Admin
from dreamcatcher.security.passwords import PasswordHasher

logger = logging.getLogger(__name__)

SAMPLE_ACCESS_KEY = "1234"


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)


async def ensure_sample_access_key(session: AsyncSession) -> bool:
    """Insert the demo access key when it is missing. Returns True if inserted."""
    existing = await session.execute(select(AccessKey.id).where(AccessKey.code == SAMPLE_ACCESS_KEY))
    if existing.first() is not None:
        return False

    session.add(AccessKey(code=SAMPLE_ACCESS_KEY, owner_label="Test Client"))
    await session.flush()
    logger.info("Inserted sample access key")
    return True


async def ensure_default_admin(session: AsyncSession, hasher: PasswordHasher, email: str) -> Optional[str]:
    """Create the first administrator if the table is empty.

    Returns the generated plaintext password so the caller can show it once,
    or ``None`` when an administrator already exists.
    """
    existing = await session.execute(select(Admin.id).limit(1))
    if existing.first() is not None:
        return None

    password = secrets.token_urlsafe(12)
    session.add(Admin(email=email, password_hash=hasher.hash(password)))
    await session.flush()
    logger.info("Created default admin", extra={"email": email})
    return password
