"""Django ORM implementation of the Address repository."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.utils import timezone

from modules.addresses.models import Address
from modules.addresses.repositories.interfaces import IAddressRepository

logger = structlog.get_logger(__name__)


class AddressDjangoRepository(IAddressRepository):
    def get_by_id(self, id: str) -> Optional[Address]:
        try:
            return Address.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_owned(self, user_id: UUID, address_id: str) -> Optional[Address]:
        """Returns ``None`` for foreign, non-existent or invalid IDs."""
        try:
            return Address.objects.filter(id=address_id, user_id=user_id).first()
        except (ValueError, ValidationError):
            return None

    def list_for_user(self, user_id: UUID) -> models.QuerySet[Address]:
        return Address.objects.filter(user_id=user_id)

    def is_referenced(self, address: Address) -> bool:
        return address.orders.exists()

    @transaction.atomic
    def save(self, entity: Address) -> Address:
        entity.save()
        logger.info("address.saved", address_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, address: Address) -> None:
        address_id = str(address.id)
        address.delete()
        logger.info("address.deleted", address_id=address_id)

    def clear_default(self, user_id: UUID, keep: Optional[UUID] = None) -> int:
        rows = Address.objects.filter(user_id=user_id, is_default=True)
        if keep is not None:
            rows = rows.exclude(id=keep)
        return rows.update(is_default=False, updated_at=timezone.now())
