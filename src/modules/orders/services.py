"""Order service layer (Use Cases).

Orchestrates order placement, status changes (including cancellation) and
user-scoped reads.

Placement validates everything before opening a transaction, in this
order (first failure wins):

1. the user behind the credential exists          -> ``UserNotFound``
2. the book exists and is not soft-deleted        -> ``BookNotFound``
3. the address exists and belongs to the user     -> ``InvalidAddress``
4. ``0 < quantity <= stock``                      -> ``InvalidQuantity``
5. prices are positive and fit their columns      -> ``InvalidPrice``
6. ``|total - quantity * price| < tolerance``     -> ``PriceMismatch``

The transaction then inserts the order and decrements stock with a
conditional ``UPDATE``; a concurrent buyer that took the last copies
makes the decrement match no row and the whole unit rolls back.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from functools import partial
from typing import TYPE_CHECKING, List, Optional

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, models, transaction

from modules.catalog.exceptions import BookNotFound, InsufficientStock
from modules.orders.constants import DEFAULT_PRICE_TOLERANCE, MONEY_QUANTUM, OrderStatus
from modules.orders.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from modules.orders.exceptions import (
    AssociatedBookMissing,
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
from modules.orders.models import Order
from shared.infrastructure.bus import event_bus as default_event_bus

if TYPE_CHECKING:
    from modules.accounts.models import User
    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.addresses.repositories.interfaces import IAddressRepository
    from modules.catalog.repositories.interfaces import IBookRepository
    from modules.core.authentication import UserRef
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.repositories.interfaces import IOrderRepository
    from shared.domain.bus import IEventBus
    from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)

ONLY_PENDING_MESSAGE = "Only pending orders can be cancelled."


def _exceeds_column(value: Decimal, field_name: str) -> bool:
    field = Order._meta.get_field(field_name)
    return abs(value) >= Decimal(10) ** (field.max_digits - field.decimal_places)


def _quantity_message(available: int) -> str:
    return (
        "Invalid quantity: must be greater than 0 and less than or equal to "
        f"available stock ({available})."
    )


@dataclass(frozen=True)
class OrderList:
    """Result of ``list_orders``.

    ``is_empty`` is the explicit "no orders" outcome; it reflects all of
    the user's orders, before any HTTP filters are applied.
    """

    orders: "models.QuerySet[Order]"
    total: int

    @property
    def is_empty(self) -> bool:
        return self.total == 0


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).
    ``price_tolerance`` defaults to ``settings.ORDER_PRICE_TOLERANCE``.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        user_repository: IUserRepository,
        book_repository: IBookRepository,
        address_repository: IAddressRepository,
        event_bus: Optional[IEventBus] = None,
        price_tolerance: Optional[Decimal] = None,
    ) -> None:
        self._order_repo = order_repository
        self._user_repo = user_repository
        self._book_repo = book_repository
        self._address_repo = address_repository
        self._event_bus = event_bus or default_event_bus
        if price_tolerance is None:
            price_tolerance = getattr(
                settings, "ORDER_PRICE_TOLERANCE", DEFAULT_PRICE_TOLERANCE
            )
        self._tolerance = Decimal(str(price_tolerance))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, user_ref: UserRef, dto: CreateOrderDTO) -> Order:
        """Place an order and reserve its stock atomically.

        Raises:
            UserNotFound, BookNotFound, InvalidAddress, InvalidQuantity,
            InvalidPrice, PriceMismatch: validation, before any write.
            InvalidQuantity: stock was taken by a concurrent order.
            InternalError: the database failed.
        """
        user = self._resolve_user(user_ref)
        log = logger.bind(user_id=str(user.id), book_id=dto.book_id)
        log.info("order.creation_started")

        book = self._book_repo.get_by_id(dto.book_id)
        if book is None:
            raise BookNotFound(f"Book with ID {dto.book_id} not found.")

        address = self._address_repo.get_owned(user.id, dto.address_id)
        if address is None:
            raise InvalidAddress("Invalid address.")

        if dto.quantity <= 0 or dto.quantity > book.quantity:
            raise InvalidQuantity(_quantity_message(book.quantity))

        if dto.price_at_purchase <= 0:
            raise InvalidPrice("Invalid price at purchase: must be greater than 0.")
        if _exceeds_column(dto.price_at_purchase, "price_at_purchase"):
            raise InvalidPrice("Invalid price at purchase: exceeds the maximum allowed value.")

        if dto.total_price <= 0:
            raise InvalidPrice("Invalid total price: must be greater than 0.")
        if _exceeds_column(dto.total_price, "total_price"):
            raise InvalidPrice("Invalid total price: exceeds the maximum allowed value.")

        expected_total = (dto.quantity * dto.price_at_purchase).quantize(
            MONEY_QUANTUM, rounding=ROUND_HALF_UP
        )
        if abs(dto.total_price - expected_total) >= self._tolerance:
            log.warning(
                "order.price_mismatch",
                expected=str(expected_total),
                received=str(dto.total_price),
            )
            raise PriceMismatch(
                f"Total price mismatch: expected {expected_total}, got {dto.total_price}."
            )

        try:
            with transaction.atomic():
                order = self._order_repo.create(
                    {
                        "user_id": user.id,
                        "book_id": book.id,
                        "address_id": address.id,
                        "quantity": dto.quantity,
                        "price_at_purchase": dto.price_at_purchase,
                        "total_price": dto.total_price,
                    }
                )
                remaining = self._book_repo.adjust_stock(book.id, -dto.quantity)
                log.info(
                    "order.stock_reserved",
                    order_id=str(order.id),
                    quantity=dto.quantity,
                    remaining=remaining,
                )

                self._order_repo.add_history(
                    order_id=order.id,
                    new_status=OrderStatus.PENDING,
                    notes="Order placed",
                    user_id=user.id,
                )
                order.add_domain_event(
                    OrderPlaced(
                        aggregate_id=order.id,
                        email=user.email,
                        total_price=str(dto.total_price),
                        book_id=str(book.id),
                        quantity=dto.quantity,
                    )
                )
                events = self._order_repo.record_events(order)
                transaction.on_commit(partial(self._publish, events))
        except InsufficientStock as exc:
            log.warning("order.stock_conflict", available=exc.available)
            raise InvalidQuantity(_quantity_message(exc.available)) from exc
        except DatabaseError as exc:
            log.exception("order.creation_failed")
            raise InternalError(str(exc)) from exc

        log.info("order.created", order_id=str(order.id))
        return self._order_repo.get_owned(user.id, order.id) or order

    def update_status(
        self,
        user_ref: UserRef,
        order_id: str,
        new_status: str,
        notes: str = "",
    ) -> Order:
        """Move a pending order to ``new_status``.

        Cancelling returns the ordered quantity to the book's stock in the
        same transaction as the status write.

        Raises:
            UserNotFound: the credential's user no longer exists.
            OrderNotFound: foreign, missing or malformed order ID.
            InvalidTransition: the order is not pending (or stopped being
                pending concurrently), or the target is not reachable.
            ValidationFailed: unknown status, or the stock restore was
                rejected by field validation.
            AssociatedBookMissing: the book to restock is gone.
            InternalError: the database failed.
        """
        user = self._resolve_user(user_ref)
        log = logger.bind(user_id=str(user.id), order_id=str(order_id), new_status=new_status)

        try:
            with transaction.atomic():
                order = self._order_repo.get_owned_for_update(user.id, order_id)
                if order is None:
                    raise OrderNotFound("Order not found.")

                if not order.is_pending:
                    log.warning("order.invalid_transition", current_status=order.status)
                    raise InvalidTransition(ONLY_PENDING_MESSAGE)

                if new_status not in OrderStatus.values:
                    raise ValidationFailed(
                        f"Status must be one of: {', '.join(OrderStatus.values)}."
                    )
                if not order.can_transition_to(new_status):
                    raise InvalidTransition(
                        f"Cannot transition from {order.status} to {new_status}."
                    )

                old_status = order.status
                if not self._order_repo.transition_status(order.id, old_status, new_status):
                    log.warning("order.concurrent_transition")
                    raise InvalidTransition(ONLY_PENDING_MESSAGE)
                order.status = new_status

                if new_status == OrderStatus.CANCELLED:
                    self._restore_stock(order, log)
                    event: DomainEvent = OrderCancelled(
                        aggregate_id=order.id,
                        book_id=str(order.book_id),
                        restored_quantity=order.quantity,
                    )
                else:
                    event = OrderStatusChanged(
                        aggregate_id=order.id,
                        old_status=old_status,
                        new_status=new_status,
                    )

                self._order_repo.add_history(
                    order_id=order.id,
                    new_status=new_status,
                    old_status=old_status,
                    notes=notes,
                    user_id=user.id,
                )
                order.add_domain_event(event)
                events = self._order_repo.record_events(order)
                transaction.on_commit(partial(self._publish, events))
        except ValidationError as exc:
            log.warning("order.stock_restore_invalid", errors=exc.messages)
            raise ValidationFailed.from_django(exc) from exc
        except DatabaseError as exc:
            log.exception("order.status_update_failed")
            raise InternalError(str(exc)) from exc

        log.info("order.status_updated", old_status=old_status)
        return self._order_repo.get_owned(user.id, order.id) or order

    def cancel_order(self, user_ref: UserRef, order_id: str, notes: str = "") -> Order:
        """Shorthand for ``update_status(..., "cancelled")``."""
        return self.update_status(
            user_ref, order_id, OrderStatus.CANCELLED, notes=notes or "Order cancelled"
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_orders(self, user_ref: UserRef) -> OrderList:
        user = self._resolve_user(user_ref)
        orders = self._order_repo.list_for_user(user.id)
        return OrderList(orders=orders, total=orders.count())

    def get_order(self, user_ref: UserRef, order_id: str) -> Order:
        """Raises ``OrderNotFound`` for foreign as well as missing orders."""
        user = self._resolve_user(user_ref)
        order = self._order_repo.get_owned(user.id, order_id)
        if order is None:
            raise OrderNotFound("Order not found.")
        return order

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_user(self, user_ref: UserRef) -> User:
        user = self._user_repo.get_active_by_id(str(user_ref.user_id))
        if user is None:
            raise UserNotFound("User not found.")
        return user

    def _restore_stock(self, order: Order, log) -> None:
        if order.book_id is None:
            log.error("order.associated_book_missing")
            raise AssociatedBookMissing("Associated book not found.")
        try:
            restored = self._book_repo.adjust_stock(order.book_id, order.quantity)
        except BookNotFound as exc:
            log.error("order.associated_book_missing", book_id=str(order.book_id))
            raise AssociatedBookMissing("Associated book not found.") from exc
        log.info(
            "order.stock_released",
            book_id=str(order.book_id),
            quantity=order.quantity,
            restored_stock=restored,
        )

    def _publish(self, events: List[DomainEvent]) -> None:
        for event in events:
            self._event_bus.publish(event)
