"""Address service layer.

Every operation is scoped to the persisted user behind the credential:
an address that belongs to someone else is indistinguishable from one
that does not exist.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import structlog
from django.db import transaction

from modules.accounts.exceptions import UserNotFound
from modules.addresses.exceptions import AddressInUse, AddressNotFound
from modules.addresses.models import Address

if TYPE_CHECKING:
    from modules.accounts.models import User
    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.addresses.dtos import CreateAddressDTO, UpdateAddressDTO
    from modules.addresses.repositories.interfaces import IAddressRepository
    from modules.core.authentication import UserRef

logger = structlog.get_logger(__name__)


class AddressService:
    def __init__(
        self,
        address_repository: IAddressRepository,
        user_repository: IUserRepository,
    ) -> None:
        self._address_repo = address_repository
        self._user_repo = user_repository

    def _resolve_user(self, user_ref: UserRef) -> User:
        user = self._user_repo.get_active_by_id(str(user_ref.user_id))
        if user is None:
            raise UserNotFound("User not found.")
        return user

    def _get_owned(self, user: User, address_id: str) -> Address:
        address = self._address_repo.get_owned(user.id, address_id)
        if address is None:
            raise AddressNotFound("Address not found.")
        return address

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_addresses(self, user_ref: UserRef) -> List[Address]:
        user = self._resolve_user(user_ref)
        return list(self._address_repo.list_for_user(user.id))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_address(self, user_ref: UserRef, dto: CreateAddressDTO) -> Address:
        user = self._resolve_user(user_ref)
        address = Address(user=user, **dto.model_dump())
        address = self._address_repo.save(address)
        if address.is_default:
            self._address_repo.clear_default(user.id, keep=address.id)
        logger.info("address.added", user_id=str(user.id), address_id=str(address.id))
        return address

    @transaction.atomic
    def update_address(
        self, user_ref: UserRef, address_id: str, dto: UpdateAddressDTO
    ) -> Address:
        user = self._resolve_user(user_ref)
        address = self._get_owned(user, address_id)

        for field, value in dto.changes().items():
            setattr(address, field, value)
        address = self._address_repo.save(address)
        if address.is_default:
            self._address_repo.clear_default(user.id, keep=address.id)

        logger.info("address.updated", user_id=str(user.id), address_id=str(address.id))
        return address

    @transaction.atomic
    def remove_address(self, user_ref: UserRef, address_id: str) -> None:
        """Delete an address unless an order still references it.

        Raises:
            AddressNotFound: not owned by the user or nonexistent.
            AddressInUse: at least one order ships to it.
        """
        user = self._resolve_user(user_ref)
        address = self._get_owned(user, address_id)
        log = logger.bind(user_id=str(user.id), address_id=str(address.id))

        if self._address_repo.is_referenced(address):
            log.warning("address.remove_blocked")
            raise AddressInUse("Address is linked to existing orders and cannot be removed.")

        self._address_repo.delete(address)
        log.info("address.removed")
