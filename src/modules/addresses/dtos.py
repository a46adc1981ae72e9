"""Address DTOs for the Service Layer.

Field rules:
- ``street``: 5-100 characters.
- ``city``: 2-50 letters, spaces or hyphens.
- ``state`` / ``country``: 2-50 letters or spaces.
- ``zip_code``: 3-10 letters, digits, spaces or hyphens.
- ``address_type``: home, work or other.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.addresses.models import AddressType

_CITY_RE = re.compile(r"^[a-zA-Z\s-]+$")
_LETTERS_RE = re.compile(r"^[a-zA-Z\s]+$")
_ZIP_RE = re.compile(r"^[a-zA-Z0-9\s-]+$")


def _check(value: Optional[str], pattern: re.Pattern, message: str) -> Optional[str]:
    if value is not None and not pattern.match(value):
        raise ValueError(message)
    return value


def _check_type(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in AddressType.values:
        raise ValueError("must be 'home', 'work', or 'other'")
    return value


class CreateAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    street: str = Field(min_length=5, max_length=100)
    city: str = Field(min_length=2, max_length=50)
    state: str = Field(min_length=2, max_length=50)
    zip_code: str = Field(min_length=3, max_length=10)
    country: str = Field(min_length=2, max_length=50)
    address_type: str = AddressType.HOME.value
    is_default: bool = False

    @field_validator("city")
    @classmethod
    def city_letters(cls, v: str) -> str:
        return _check(v, _CITY_RE, "must contain only letters, spaces, or hyphens")

    @field_validator("state", "country")
    @classmethod
    def letters_only(cls, v: str) -> str:
        return _check(v, _LETTERS_RE, "must contain only letters and spaces (no numbers)")

    @field_validator("zip_code")
    @classmethod
    def zip_format(cls, v: str) -> str:
        return _check(
            v,
            _ZIP_RE,
            "must be 3-10 characters including letters, numbers, spaces, or hyphens",
        )

    @field_validator("address_type")
    @classmethod
    def known_type(cls, v: str) -> str:
        return _check_type(v)


class UpdateAddressDTO(BaseModel):
    """Partial update: only supplied fields are applied."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    street: Optional[str] = Field(default=None, min_length=5, max_length=100)
    city: Optional[str] = Field(default=None, min_length=2, max_length=50)
    state: Optional[str] = Field(default=None, min_length=2, max_length=50)
    zip_code: Optional[str] = Field(default=None, min_length=3, max_length=10)
    country: Optional[str] = Field(default=None, min_length=2, max_length=50)
    address_type: Optional[str] = None
    is_default: Optional[bool] = None

    @field_validator("city")
    @classmethod
    def city_letters(cls, v: Optional[str]) -> Optional[str]:
        return _check(v, _CITY_RE, "must contain only letters, spaces, or hyphens")

    @field_validator("state", "country")
    @classmethod
    def letters_only(cls, v: Optional[str]) -> Optional[str]:
        return _check(v, _LETTERS_RE, "must contain only letters and spaces (no numbers)")

    @field_validator("zip_code")
    @classmethod
    def zip_format(cls, v: Optional[str]) -> Optional[str]:
        return _check(
            v,
            _ZIP_RE,
            "must be 3-10 characters including letters, numbers, spaces, or hyphens",
        )

    @field_validator("address_type")
    @classmethod
    def known_type(cls, v: Optional[str]) -> Optional[str]:
        return _check_type(v)

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)
