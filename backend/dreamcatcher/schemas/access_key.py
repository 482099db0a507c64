from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class KeyValidationRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    key: Optional[str] = None


class KeyValidationResponse(BaseModel):
    valid: bool
    message: str


class AccessKeyCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    owner_label: Optional[str] = None
