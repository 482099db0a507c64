from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from dreamcatcher.errors import StorageError
from dreamcatcher.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    options: dict = {"echo": settings.database_echo, "pool_pre_ping": True}
    if not settings.database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=settings.database_pool_timeout,
        )
    return create_async_engine(settings.database_url, **options)


@lru_cache
def get_engine() -> AsyncEngine:
    return build_engine(get_settings())


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), expire_on_commit=False, class_=AsyncSession)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with get_session_factory()() as session:
        yield session


@asynccontextmanager
async def unit_of_work(session: AsyncSession, timeout: float) -> AsyncIterator[AsyncSession]:
    """Run a block inside one transaction that commits or rolls back as a whole.

    ``IntegrityError`` is re-raised untouched so callers can react to unique
    constraint violations. Every other database failure, and running past
    ``timeout`` seconds, surfaces as ``StorageError`` after the rollback.
    """
    try:
        async with asyncio.timeout(timeout):
            async with session.begin():
                yield session
    except IntegrityError:
        raise
    except SQLAlchemyError as exc:
        logger.exception("Transaction failed and was rolled back")
        raise StorageError() from exc
    except TimeoutError as exc:
        logger.error("Transaction exceeded %.1fs and was rolled back", timeout)
        raise StorageError() from exc
