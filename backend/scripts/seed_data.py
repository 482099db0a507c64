from __future__ import annotations

import asyncio

from dreamcatcher.db.database import get_engine, get_session_factory
from dreamcatcher.db.seed import create_tables, ensure_default_admin, ensure_sample_access_key
from dreamcatcher.security.passwords import PasswordHasher
from dreamcatcher.utils.config import get_settings


async def seed() -> None:
    settings = get_settings()
    engine = get_engine()
    await create_tables(engine)

    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    async with get_session_factory()() as session:
        async with session.begin():
            await ensure_sample_access_key(session)
            password = await ensure_default_admin(session, hasher, settings.default_admin_email)

    if password:
        print("============================================")
        print("CREATED DEFAULT ADMIN USER:")
        print(f"Email: {settings.default_admin_email}")
        print(f"Password: {password}")
        print("Use these credentials to log in to the admin panel.")
        print("============================================")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
