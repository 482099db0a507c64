from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import Depends
from jose import JWTError, jwt

from dreamcatcher.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

CLIENT_DOMAIN = "client"
ADMIN_DOMAIN = "admin"

_REGISTERED_CLAIMS = {"aud", "iat", "exp", "nbf", "iss", "jti"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies signed session tokens for one principal domain.

    Each domain signs with its own secret and stamps its name into the ``aud``
    claim, so a token minted for one domain never verifies in another.
    """

    def __init__(
        self,
        domain: str,
        secret: str,
        ttl: timedelta = timedelta(hours=24),
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError(f"Signing secret for the {domain!r} domain is empty")
        self.domain = domain
        self._secret = secret
        self.ttl = ttl
        self.algorithm = algorithm
        self._clock = clock

    def issue(self, claims: Dict[str, Any]) -> str:
        issued_at = self._clock()
        payload = {
            **claims,
            "aud": self.domain,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """Return the caller claims of a valid token, otherwise ``None``."""
        if not token:
            return None
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm], audience=self.domain)
        except JWTError:
            logger.info("Rejected session token", extra={"domain": self.domain})
            return None
        return {key: value for key, value in payload.items() if key not in _REGISTERED_CLAIMS}


def build_token_service(domain: str, settings: Settings) -> TokenService:
    secret = settings.admin_jwt_secret if domain == ADMIN_DOMAIN else settings.jwt_secret
    return TokenService(
        domain=domain,
        secret=secret,
        ttl=timedelta(hours=settings.token_ttl_hours),
        algorithm=settings.jwt_algorithm,
    )


def get_client_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return build_token_service(CLIENT_DOMAIN, settings)


def get_admin_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return build_token_service(ADMIN_DOMAIN, settings)
