from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class BookingSubmission(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)

    access_key: Optional[str] = None
    password: Optional[str] = None
    package_name: Optional[str] = None
    total_price: Optional[Decimal] = None
    selected_items: Any = None
    bride_name: Optional[str] = None
    groom_name: Optional[str] = None
    wedding_date: Optional[date] = None
    bride_address: Optional[str] = None
    groom_address: Optional[str] = None
    locations: Optional[str] = None
    schedule: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    additional_info: Optional[str] = None
    discount_code: Optional[str] = None

    @field_validator("wedding_date", "total_price", mode="before")
    @classmethod
    def blank_is_missing(cls, value: Any) -> Any:
        return _blank_to_none(value)


class BookingCreated(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str
    booking_id: int
    client_id: str


class ClientBookingUpdate(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    bride_address: Optional[str] = None
    groom_address: Optional[str] = None
    locations: Optional[str] = None
    schedule: Optional[str] = None
    additional_info: Optional[str] = None


class AdminBookingUpdate(ClientBookingUpdate):
    bride_name: Optional[str] = None
    groom_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    wedding_date: Optional[date] = None

    @field_validator("wedding_date", mode="before")
    @classmethod
    def blank_is_missing(cls, value: Any) -> Any:
        return _blank_to_none(value)
