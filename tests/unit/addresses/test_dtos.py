"""Unit tests for address DTO field rules."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from modules.addresses.dtos import CreateAddressDTO, UpdateAddressDTO

pytestmark = pytest.mark.unit

VALID = {
    "street": "12 Library Lane",
    "city": "Saint-Malo",
    "state": "Brittany",
    "zip_code": "35400",
    "country": "France",
}


def _errors(exc: ValidationError) -> dict:
    return {err["loc"][0]: err for err in exc.errors()}


class TestCreateAddressDTO:
    def test_valid_address_defaults_to_home(self):
        dto = CreateAddressDTO(**VALID)
        assert dto.address_type == "home"
        assert dto.is_default is False

    def test_strips_whitespace(self):
        dto = CreateAddressDTO(**{**VALID, "city": "  Paris  "})
        assert dto.city == "Paris"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("street", "abc"),
            ("street", "x" * 101),
            ("city", "Paris 15"),
            ("state", "Zone 9"),
            ("country", "Fr4nce"),
            ("zip_code", "12"),
            ("zip_code", "12#45"),
            ("address_type", "castle"),
        ],
    )
    def test_rejects_invalid_field(self, field, value):
        with pytest.raises(ValidationError) as info:
            CreateAddressDTO(**{**VALID, field: value})
        assert field in _errors(info.value)

    def test_missing_fields_are_reported(self):
        with pytest.raises(ValidationError) as info:
            CreateAddressDTO()
        assert set(_errors(info.value)) == {"street", "city", "state", "zip_code", "country"}

    def test_type_message(self):
        with pytest.raises(ValidationError) as info:
            CreateAddressDTO(**{**VALID, "address_type": "castle"})
        assert "must be 'home', 'work', or 'other'" in str(info.value)


class TestUpdateAddressDTO:
    def test_changes_only_contains_supplied_fields(self):
        dto = UpdateAddressDTO(city="Lyon", is_default=True)
        assert dto.changes() == {"city": "Lyon", "is_default": True}

    def test_empty_update_is_valid(self):
        assert UpdateAddressDTO().changes() == {}

    def test_supplied_fields_are_still_validated(self):
        with pytest.raises(ValidationError):
            UpdateAddressDTO(zip_code="1")
