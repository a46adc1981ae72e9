"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into HTTP status codes
(404 for unknown references, 422 for rule violations, 500 for
``InternalError``); the view never swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.repositories import UserDjangoRepository
from modules.addresses.repositories import AddressDjangoRepository
from modules.catalog.repositories import BookDjangoRepository
from modules.core.exceptions import error_response
from modules.core.pagination import StandardResultsSetPagination
from modules.orders.dtos import CreateOrderDTO, UpdateOrderStatusDTO
from modules.orders.exceptions import (
    AssociatedBookMissing,
    BookNotFound,
    InternalError,
    InvalidAddress,
    InvalidPrice,
    InvalidQuantity,
    InvalidTransition,
    OrderNotFound,
    PriceMismatch,
    UserNotFound,
    ValidationFailed,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.serializers import (
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)
from modules.orders.services import OrderService


def _order_payload(data):
    """Accept both ``{...}`` and ``{"order": {...}}`` request bodies."""
    nested = data.get("order") if hasattr(data, "get") else None
    return nested if isinstance(nested, dict) else data


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer, always scoped to the caller.
    """

    queryset = Order.objects.none()
    filterset_class = OrderFilter
    filter_backends = [DjangoFilterBackend]
    pagination_class = StandardResultsSetPagination

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            user_repository=UserDjangoRepository(),
            book_repository=BookDjangoRepository(),
            address_repository=AddressDjangoRepository(),
        )

    def get_throttles(self) -> list[BaseThrottle]:
        """Scoped throttling per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        create_serializer = CreateOrderSerializer(data=_order_payload(request.data))
        create_serializer.is_valid(raise_exception=True)
        dto = CreateOrderDTO(**create_serializer.validated_data)

        try:
            order = self._service.create_order(request.user, dto)
        except (UserNotFound, BookNotFound, InvalidAddress) as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        except (InvalidQuantity, InvalidPrice, PriceMismatch) as exc:
            return error_response(exc, status.HTTP_422_UNPROCESSABLE_ENTITY)
        except InternalError as exc:
            return error_response(exc, status.HTTP_500_INTERNAL_SERVER_ERROR)

        out = OrderSerializer(order)
        return Response(out.data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        A user without any order gets ``{"type": "OrdersEmpty"}`` (200).
        ``status`` / ``start_date`` / ``end_date`` filter the rest.
        """
        try:
            result = self._service.list_orders(request.user)
        except UserNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)

        if result.is_empty:
            return Response(
                {"type": "OrdersEmpty", "detail": "No orders found.", "results": []}
            )

        queryset = self.filter_queryset(result.orders)
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(request.user, pk)
        except (UserNotFound, OrderNotFound) as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Status Update / Cancel
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/ with ``{"status": "..."}``"""
        status_serializer = UpdateOrderStatusSerializer(data=_order_payload(request.data))
        status_serializer.is_valid(raise_exception=True)
        dto = UpdateOrderStatusDTO(**status_serializer.validated_data)
        return self._change_status(request, pk, dto.status, dto.notes)

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/"""
        notes = request.data.get("notes", "") if hasattr(request.data, "get") else ""
        return self._change_status(request, pk, "cancelled", notes or "Order cancelled")

    def _change_status(
        self, request: Request, pk: str | None, new_status: str, notes: str
    ) -> Response:
        try:
            order = self._service.update_status(
                request.user, pk, new_status.strip().lower(), notes=notes
            )
        except (UserNotFound, OrderNotFound) as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        except (InvalidTransition, AssociatedBookMissing, ValidationFailed) as exc:
            return error_response(exc, status.HTTP_422_UNPROCESSABLE_ENTITY)
        except InternalError as exc:
            return error_response(exc, status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(OrderSerializer(order).data)
