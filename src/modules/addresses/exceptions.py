"""Address domain exceptions."""

from __future__ import annotations

from shared.domain.exceptions import DomainError


class AddressNotFound(DomainError):
    """No address with that ID belongs to the requesting user."""


class AddressInUse(DomainError):
    """The address is referenced by at least one order and cannot be removed."""
