from __future__ import annotations

import logging
import secrets
import string
from typing import Any, Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dreamcatcher.db.database import unit_of_work
from dreamcatcher.errors import AllocationExhausted, StorageError

logger = logging.getLogger(__name__)

CLIENT_CODE_ALPHABET = string.digits
CLIENT_CODE_LENGTH = 4
ACCESS_KEY_ALPHABET = string.ascii_uppercase + string.digits
ACCESS_KEY_LENGTH = 6

T = TypeVar("T")

ExistsCheck = Callable[[str], Awaitable[bool]]


def is_unique_violation(exc: IntegrityError, column: str) -> bool:
    """True when ``exc`` reports a duplicate value in ``column``.

    Matches both the PostgreSQL wording (``duplicate key value violates unique
    constraint "bookings_client_code_key"``) and SQLite's
    (``UNIQUE constraint failed: bookings.client_code``).
    """
    message = str(exc.orig).lower()
    return ("unique" in message or "duplicate" in message) and column.lower() in message


class CodeAllocator:
    """Draws random codes and keeps drawing until one is not taken yet.

    The existence check only narrows the odds of a clash. The unique
    constraint on the target column is what actually guarantees uniqueness,
    which is why ``insert_unique`` treats a unique violation on the code
    column as one more collision and starts over.
    """

    def __init__(
        self,
        alphabet: str,
        length: int,
        max_attempts: int = 1000,
        insert_retries: int = 3,
        rng: Optional[Any] = None,
    ) -> None:
        if not alphabet or length < 1:
            raise ValueError("alphabet must be non-empty and length positive")
        self.alphabet = alphabet
        self.length = length
        self.max_attempts = max_attempts
        self.insert_retries = insert_retries
        self._rng = rng or secrets.SystemRandom()

    @classmethod
    def for_client_codes(cls, **kwargs: Any) -> "CodeAllocator":
        return cls(CLIENT_CODE_ALPHABET, CLIENT_CODE_LENGTH, **kwargs)

    @classmethod
    def for_access_keys(cls, **kwargs: Any) -> "CodeAllocator":
        return cls(ACCESS_KEY_ALPHABET, ACCESS_KEY_LENGTH, **kwargs)

    def generate(self) -> str:
        return "".join(self._rng.choice(self.alphabet) for _ in range(self.length))

    async def allocate(self, exists: ExistsCheck) -> str:
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.generate()
            if not await exists(candidate):
                if attempt > 1:
                    logger.info("Allocated code after collisions", extra={"attempts": attempt, "length": self.length})
                return candidate

        logger.error(
            "Code space close to exhaustion: no free code after %d draws",
            self.max_attempts,
            extra={"alphabet_size": len(self.alphabet), "length": self.length},
        )
        raise AllocationExhausted()

    async def insert_unique(
        self,
        session: AsyncSession,
        exists: ExistsCheck,
        insert: Callable[[str], Awaitable[T]],
        timeout: float,
        column: str,
    ) -> T:
        """Allocate a code and persist it in one unit of work.

        ``insert`` receives the allocated code and must flush the new row so a
        unique violation surfaces inside the transaction. Only a duplicate in
        ``column`` counts as a collision; any other integrity failure is a
        storage error.
        """
        for cycle in range(1, self.insert_retries + 1):
            try:
                async with unit_of_work(session, timeout):
                    code = await self.allocate(exists)
                    return await insert(code)
            except IntegrityError as exc:
                if not is_unique_violation(exc, column):
                    logger.exception("Insert failed on a constraint other than the code column")
                    raise StorageError() from exc
                logger.warning("Code taken concurrently, retrying allocation", extra={"cycle": cycle})

        logger.error("Every insert cycle collided on a unique code", extra={"cycles": self.insert_retries})
        raise AllocationExhausted()
