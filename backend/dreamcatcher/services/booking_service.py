from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dreamcatcher.db.database import unit_of_work
from dreamcatcher.errors import NotFoundError, ValidationError
from dreamcatcher.models import Booking
from dreamcatcher.models.booking import ADMIN_EDITABLE_FIELDS, CLIENT_EDITABLE_FIELDS
from dreamcatcher.security.passwords import PasswordHasher, get_password_hasher
from dreamcatcher.services.code_allocator import CodeAllocator
from dreamcatcher.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

ADMIN_REQUIRED_FIELDS = ("bride_name", "groom_name", "email", "phone_number", "wedding_date")


@dataclass
class BookingPayload:
    access_key: Optional[str]
    password: Optional[str]
    package_name: Optional[str]
    total_price: Optional[Decimal]
    email: Optional[str]
    phone_number: Optional[str]
    selected_items: Any = None
    bride_name: Optional[str] = None
    groom_name: Optional[str] = None
    wedding_date: Optional[date] = None
    bride_address: Optional[str] = None
    groom_address: Optional[str] = None
    locations: Optional[str] = None
    schedule: Optional[str] = None
    additional_info: Optional[str] = None
    discount_code: Optional[str] = None

    def missing_fields(self) -> list[str]:
        required = {
            "access_key": self.access_key,
            "password": self.password,
            "package_name": self.package_name,
            "total_price": self.total_price,
            "email": self.email,
            "phone_number": self.phone_number,
        }
        return [name for name, value in required.items() if _is_blank(value)]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, Decimal):
        return value == 0
    return False


class BookingService:
    """Creates bookings and applies client or admin edits to them."""

    def __init__(self, hasher: PasswordHasher, allocator: CodeAllocator, timeout: float = 10.0) -> None:
        self.hasher = hasher
        self.allocator = allocator
        self.timeout = timeout

    async def _client_code_exists(self, session: AsyncSession, code: str) -> bool:
        result = await session.execute(select(Booking.id).where(Booking.client_code == code))
        return result.first() is not None

    async def create_booking(self, session: AsyncSession, payload: BookingPayload) -> Booking:
        missing = payload.missing_fields()
        if missing:
            logger.info("Booking submission rejected", extra={"missing_fields": missing})
            raise ValidationError("Missing required booking information.")

        password_hash = await asyncio.to_thread(self.hasher.hash, payload.password)

        async def insert(client_code: str) -> Booking:
            booking = Booking(
                client_code=client_code,
                password_hash=password_hash,
                access_key=payload.access_key.strip(),
                package_name=payload.package_name,
                total_price=payload.total_price,
                selected_items=payload.selected_items,
                bride_name=payload.bride_name,
                groom_name=payload.groom_name,
                wedding_date=payload.wedding_date,
                bride_address=payload.bride_address,
                groom_address=payload.groom_address,
                locations=payload.locations,
                schedule=payload.schedule,
                email=payload.email,
                phone_number=payload.phone_number,
                additional_info=payload.additional_info,
                discount_code=payload.discount_code,
            )
            session.add(booking)
            await session.flush()
            return booking

        booking = await self.allocator.insert_unique(
            session,
            exists=lambda code: self._client_code_exists(session, code),
            insert=insert,
            timeout=self.timeout,
            column="client_code",
        )
        logger.info("Booking created", extra={"booking_id": booking.id, "client_code": booking.client_code})
        return booking

    async def find_by_client_code(self, session: AsyncSession, client_code: str) -> Optional[Booking]:
        result = await session.execute(select(Booking).where(Booking.client_code == client_code))
        return result.scalar_one_or_none()

    async def get_by_client_code(self, session: AsyncSession, client_code: str) -> Booking:
        booking = await self.find_by_client_code(session, client_code)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    async def update_own_booking(self, session: AsyncSession, client_code: str, changes: Dict[str, Any]) -> Booking:
        async with unit_of_work(session, self.timeout):
            booking = await self.find_by_client_code(session, client_code)
            if not booking:
                raise NotFoundError("Booking not found")
            for field in CLIENT_EDITABLE_FIELDS:
                if field in changes:
                    setattr(booking, field, changes[field])
        logger.info("Booking updated by client", extra={"booking_id": booking.id, "fields": sorted(changes)})
        return booking

    async def list_bookings(self, session: AsyncSession) -> list[Booking]:
        stmt = select(Booking).order_by(Booking.created_at.desc(), Booking.id.desc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def get_booking(self, session: AsyncSession, booking_id: int) -> Booking:
        booking = await session.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    async def update_booking(self, session: AsyncSession, booking_id: int, changes: Dict[str, Any]) -> Booking:
        if any(_is_blank(changes.get(field)) for field in ADMIN_REQUIRED_FIELDS):
            raise ValidationError("Missing required fields for update.")

        async with unit_of_work(session, self.timeout):
            booking = await session.get(Booking, booking_id)
            if not booking:
                raise NotFoundError("Booking not found")
            for field in ADMIN_EDITABLE_FIELDS:
                setattr(booking, field, changes.get(field))
        logger.info("Booking updated by admin", extra={"booking_id": booking.id})
        return booking


def get_booking_service(
    hasher: PasswordHasher = Depends(get_password_hasher),
    settings: Settings = Depends(get_settings),
) -> BookingService:
    allocator = CodeAllocator.for_client_codes(
        max_attempts=settings.code_allocation_max_attempts,
        insert_retries=settings.code_insert_retries,
    )
    return BookingService(hasher=hasher, allocator=allocator, timeout=settings.unit_of_work_timeout)
