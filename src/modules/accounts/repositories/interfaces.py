from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import User


class IUserRepository(IRepository["User"]):
    """Repository contract for user accounts (read side of the ledger)."""

    @abstractmethod
    def get_active_by_id(self, id: str) -> Optional[User]:
        """Retrieve an active user; ``None`` when missing or deactivated."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by (normalised) email."""
