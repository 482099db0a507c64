from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dreamcatcher.errors import InvalidCredentials, ValidationError
from dreamcatcher.models import Admin, Booking
from dreamcatcher.security.passwords import PasswordHasher, get_password_hasher
from dreamcatcher.security.tokens import TokenService, get_admin_token_service, get_client_token_service

logger = logging.getLogger(__name__)


class AuthService:
    """Password logins for clients (by client code) and administrators (by email)."""

    def __init__(self, hasher: PasswordHasher, client_tokens: TokenService, admin_tokens: TokenService) -> None:
        self.hasher = hasher
        self.client_tokens = client_tokens
        self.admin_tokens = admin_tokens

    async def _check_password(self, password: str, digest: Optional[str]) -> bool:
        if digest is None:
            return await asyncio.to_thread(self.hasher.verify_missing, password)
        return await asyncio.to_thread(self.hasher.verify, password, digest)

    async def login_client(self, session: AsyncSession, client_code: Optional[str], password: Optional[str]) -> str:
        if not client_code or not client_code.strip() or not password:
            raise ValidationError("Client ID and password are required.")

        result = await session.execute(select(Booking).where(Booking.client_code == client_code.strip()))
        booking = result.scalar_one_or_none()
        if not await self._check_password(password, booking.password_hash if booking else None):
            logger.info("Client login failed")
            raise InvalidCredentials("Invalid client ID or password.")

        return self.client_tokens.issue({"sub": booking.client_code})

    async def login_admin(self, session: AsyncSession, email: Optional[str], password: Optional[str]) -> str:
        if not email or not email.strip() or not password:
            raise ValidationError("Email and password are required.")

        result = await session.execute(select(Admin).where(Admin.email == email.strip()))
        admin = result.scalar_one_or_none()
        if not await self._check_password(password, admin.password_hash if admin else None):
            logger.info("Admin login failed")
            raise InvalidCredentials("Invalid email or password.")

        logger.info("Admin logged in", extra={"admin_id": admin.id})
        return self.admin_tokens.issue({"sub": str(admin.id), "email": admin.email})


def get_auth_service(
    hasher: PasswordHasher = Depends(get_password_hasher),
    client_tokens: TokenService = Depends(get_client_token_service),
    admin_tokens: TokenService = Depends(get_admin_token_service),
) -> AuthService:
    return AuthService(hasher=hasher, client_tokens=client_tokens, admin_tokens=admin_tokens)
