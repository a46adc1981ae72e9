"""Account domain exceptions."""

from __future__ import annotations

from shared.domain.exceptions import DomainError


class UserNotFound(DomainError):
    """The credential is valid but its user no longer exists."""
