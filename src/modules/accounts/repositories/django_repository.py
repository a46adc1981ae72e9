"""Django ORM implementation of the user repository."""

from __future__ import annotations

from typing import Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.accounts.models import User
from modules.accounts.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class UserDjangoRepository(IUserRepository):
    def get_by_id(self, id: str) -> Optional[User]:
        """Returns ``None`` for non-existent or invalid IDs."""
        try:
            return User.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_active_by_id(self, id: str) -> Optional[User]:
        user = self.get_by_id(id)
        if user is None or not user.is_active:
            return None
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        return User.objects.filter(email__iexact=email.strip()).first()

    @transaction.atomic
    def save(self, entity: User) -> User:
        entity.save()
        logger.info("user.saved", user_id=str(entity.id))
        return entity
