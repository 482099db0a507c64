from __future__ import annotations

import logging
from functools import lru_cache

import bcrypt
from fastapi import Depends

from dreamcatcher.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]


@lru_cache
def _placeholder_digest(rounds: int) -> str:
    return bcrypt.hashpw(b"no-such-account", bcrypt.gensalt(rounds=rounds)).decode("utf-8")


class PasswordHasher:
    """Salted bcrypt hashing for booking and admin passwords."""

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        return bcrypt.hashpw(_encode(plaintext), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify_missing(self, plaintext: str) -> bool:
        """Spend the same bcrypt work as ``verify`` for an account that does not exist.

        Keeps failed logins for unknown and known identifiers equally slow.
        Always returns False.
        """
        self.verify(plaintext, _placeholder_digest(self.rounds))
        return False

    def verify(self, plaintext: str, digest: str) -> bool:
        """Check ``plaintext`` against a stored digest.

        A corrupted or otherwise unusable digest counts as a mismatch.
        """
        try:
            return bcrypt.checkpw(_encode(plaintext), digest.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            logger.warning("Stored password digest could not be checked")
            return False


def get_password_hasher(settings: Settings = Depends(get_settings)) -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)
