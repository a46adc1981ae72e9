from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.addresses.models import Address


class IAddressRepository(IRepository["Address"]):
    """Repository contract for user-scoped shipping addresses."""

    @abstractmethod
    def get_owned(self, user_id: UUID, address_id: str) -> Optional[Address]:
        """Return the address only if it belongs to ``user_id``."""

    @abstractmethod
    def list_for_user(self, user_id: UUID) -> "models.QuerySet[Address]":
        """All addresses of one user, default first."""

    @abstractmethod
    def is_referenced(self, address: Address) -> bool:
        """Whether any order points at this address."""

    @abstractmethod
    def delete(self, address: Address) -> None:
        """Physically remove the address."""

    @abstractmethod
    def clear_default(self, user_id: UUID, keep: Optional[UUID] = None) -> int:
        """Unset ``is_default`` on the user's other addresses."""
