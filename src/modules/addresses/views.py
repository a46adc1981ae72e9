"""Address API views.

Exposes ``AddressService`` via HTTP.  Domain exceptions are caught and
translated into the standard error envelope.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.accounts.exceptions import UserNotFound
from modules.accounts.repositories import UserDjangoRepository
from modules.addresses.dtos import CreateAddressDTO, UpdateAddressDTO
from modules.addresses.exceptions import AddressInUse, AddressNotFound
from modules.addresses.models import Address
from modules.addresses.repositories import AddressDjangoRepository
from modules.addresses.serializers import AddressSerializer
from modules.addresses.services import AddressService
from modules.core.exceptions import error_response
from shared.domain.exceptions import ValidationFailed

_FIELDS = ("street", "city", "state", "zip_code", "country", "is_default")


def _address_fields(data) -> dict:
    fields = {name: data[name] for name in _FIELDS if name in data}
    address_type = data.get("type", data.get("address_type"))
    if address_type is not None:
        fields["address_type"] = address_type
    return fields


class AddressViewSet(GenericViewSet):
    queryset = Address.objects.none()
    serializer_class = AddressSerializer
    pagination_class = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AddressService(
            address_repository=AddressDjangoRepository(),
            user_repository=UserDjangoRepository(),
        )

    def list(self, request: Request) -> Response:
        """GET /api/v1/addresses/"""
        try:
            addresses = self._service.list_addresses(request.user)
        except UserNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(AddressSerializer(addresses, many=True).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/addresses/"""
        try:
            dto = CreateAddressDTO(**_address_fields(request.data))
        except PydanticValidationError as exc:
            return error_response(
                ValidationFailed.from_pydantic(exc),
                status.HTTP_422_UNPROCESSABLE_ENTITY,
            )

        try:
            address = self._service.add_address(request.user, dto)
        except UserNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)

        return Response(AddressSerializer(address).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/addresses/{pk}/"""
        try:
            dto = UpdateAddressDTO(**_address_fields(request.data))
        except PydanticValidationError as exc:
            return error_response(
                ValidationFailed.from_pydantic(exc),
                status.HTTP_422_UNPROCESSABLE_ENTITY,
            )

        try:
            address = self._service.update_address(request.user, pk, dto)
        except (UserNotFound, AddressNotFound) as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)

        return Response(AddressSerializer(address).data)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/addresses/{pk}/"""
        return self.partial_update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/addresses/{pk}/"""
        try:
            self._service.remove_address(request.user, pk)
        except (UserNotFound, AddressNotFound) as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        except AddressInUse as exc:
            return error_response(exc, status.HTTP_422_UNPROCESSABLE_ENTITY)
        return Response(status=status.HTTP_204_NO_CONTENT)
