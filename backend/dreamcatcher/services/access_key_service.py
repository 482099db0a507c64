from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dreamcatcher.db.database import unit_of_work
from dreamcatcher.errors import NotFoundError
from dreamcatcher.models import AccessKey
from dreamcatcher.services.code_allocator import CodeAllocator
from dreamcatcher.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


class AccessKeyService:
    """Mints, checks and removes the access keys handed out to prospective clients."""

    def __init__(self, allocator: CodeAllocator, timeout: float = 10.0) -> None:
        self.allocator = allocator
        self.timeout = timeout

    async def _code_exists(self, session: AsyncSession, code: str) -> bool:
        result = await session.execute(select(AccessKey.id).where(AccessKey.code == code))
        return result.first() is not None

    async def create_access_key(self, session: AsyncSession, owner_label: Optional[str] = None) -> AccessKey:
        async def insert(code: str) -> AccessKey:
            access_key = AccessKey(code=code, owner_label=owner_label)
            session.add(access_key)
            await session.flush()
            return access_key

        access_key = await self.allocator.insert_unique(
            session,
            exists=lambda code: self._code_exists(session, code),
            insert=insert,
            timeout=self.timeout,
            column="code",
        )
        logger.info("Access key created", extra={"access_key_id": access_key.id, "owner_label": owner_label})
        return access_key

    async def validate_key(self, session: AsyncSession, code: str) -> bool:
        return await self._code_exists(session, code.strip())

    async def list_access_keys(self, session: AsyncSession) -> list[AccessKey]:
        result = await session.execute(select(AccessKey).order_by(AccessKey.created_at.desc(), AccessKey.id.desc()))
        return list(result.scalars().all())

    async def delete_access_key(self, session: AsyncSession, key_id: int) -> None:
        async with unit_of_work(session, self.timeout):
            access_key = await session.get(AccessKey, key_id)
            if not access_key:
                raise NotFoundError("Access key not found")
            await session.delete(access_key)
        logger.info("Access key deleted", extra={"access_key_id": key_id})


def get_access_key_service(settings: Settings = Depends(get_settings)) -> AccessKeyService:
    allocator = CodeAllocator.for_access_keys(
        max_attempts=settings.code_allocation_max_attempts,
        insert_retries=settings.code_insert_retries,
    )
    return AccessKeyService(allocator=allocator, timeout=settings.unit_of_work_timeout)
