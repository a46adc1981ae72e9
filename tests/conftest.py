from decimal import Decimal
from itertools import count

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from modules.accounts.models import User
from modules.accounts.repositories import UserDjangoRepository
from modules.addresses.models import Address
from modules.addresses.repositories import AddressDjangoRepository
from modules.catalog.models import Book
from modules.catalog.repositories import BookDjangoRepository
from modules.core.authentication import UserRef
from modules.orders.dtos import CreateOrderDTO
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderService

_sequence = count(1)


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test clean."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_user():
    def _make(**overrides) -> User:
        n = next(_sequence)
        data = {
            "email": f"reader{n}@example.com",
            "name": f"Reader {n}",
            "password": "s3cret-pass",
        }
        data.update(overrides)
        return User.objects.create_user(**data)

    return _make


@pytest.fixture()
def make_book():
    def _make(**overrides) -> Book:
        n = next(_sequence)
        data = {
            "name": f"Book {n}",
            "author": "Ursula K. Le Guin",
            "mrp": Decimal("20.00"),
            "discounted_price": Decimal("15.00"),
            "quantity": 10,
            "genre": "Fantasy",
        }
        data.update(overrides)
        return Book.objects.create(**data)

    return _make


@pytest.fixture()
def make_address():
    def _make(user: User, **overrides) -> Address:
        data = {
            "street": "221B Baker Street",
            "city": "London",
            "state": "Greater London",
            "zip_code": "NW1 6XE",
            "country": "United Kingdom",
        }
        data.update(overrides)
        return Address.objects.create(user=user, **data)

    return _make


@pytest.fixture()
def user(make_user):
    return make_user()


@pytest.fixture()
def book(make_book):
    return make_book()


@pytest.fixture()
def address(make_address, user):
    return make_address(user)


@pytest.fixture()
def user_ref(user):
    return UserRef(user_id=user.id, email=user.email)


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------


def _bearer(user: User) -> str:
    return f"Bearer {AccessToken.for_user(user)}"


@pytest.fixture()
def bearer():
    """Build an ``Authorization`` header value for a user."""
    return _bearer


@pytest.fixture()
def auth_client(api_client, user):
    """APIClient carrying a real access token for ``user``."""
    api_client.credentials(HTTP_AUTHORIZATION=_bearer(user))
    return api_client


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        user_repository=UserDjangoRepository(),
        book_repository=BookDjangoRepository(),
        address_repository=AddressDjangoRepository(),
    )


def _order_dto(book: Book, address: Address, quantity: int = 1, **overrides) -> CreateOrderDTO:
    data = {
        "book_id": str(book.id),
        "address_id": str(address.id),
        "quantity": quantity,
        "price_at_purchase": book.discounted_price,
        "total_price": book.discounted_price * quantity,
    }
    data.update(overrides)
    return CreateOrderDTO(**data)


@pytest.fixture()
def make_dto():
    """Build a consistent ``CreateOrderDTO``; keyword overrides win."""
    return _order_dto


@pytest.fixture()
def place_order(order_service):
    """Place an order through the service and return it."""

    def _place(ref: UserRef, book: Book, address: Address, quantity: int = 1):
        return order_service.create_order(ref, _order_dto(book, address, quantity))

    return _place
