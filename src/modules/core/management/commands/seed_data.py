from __future__ import annotations

import random
from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.accounts.models import User, UserRole
from modules.accounts.repositories import UserDjangoRepository
from modules.addresses.models import Address, AddressType
from modules.addresses.repositories import AddressDjangoRepository
from modules.catalog.models import Book
from modules.catalog.repositories import BookDjangoRepository
from modules.core.authentication import UserRef
from modules.orders.dtos import CreateOrderDTO
from modules.orders.exceptions import InvalidQuantity
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderService


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=30)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users = self._seed_users()
        books = self._seed_books()
        addresses = self._seed_addresses(users)
        orders_created = self._seed_orders(users, books, addresses, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={len(users)}, "
                f"books={len(books)}, "
                f"addresses={len(addresses)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> list[User]:
        self.stdout.write("Creating users...")
        if not User.objects.filter(email="admin@bookstore.local").exists():
            User.objects.create_superuser(
                "admin@bookstore.local", password="admin123", name="Admin"
            )
        seed_users = [
            ("Alice Reader", "alice@example.com", "+911234567890"),
            ("Bob Page", "bob@example.com", "+919876543210"),
            ("Carol Spine", "carol@example.com", None),
        ]
        users: list[User] = []
        for name, email, mobile in seed_users:
            user = User.objects.filter(email=email).first()
            if user is None:
                user = User.objects.create_user(
                    email,
                    password="reader123",
                    name=name,
                    mobile_number=mobile,
                    role=UserRole.USER,
                )
            users.append(user)
        self.stdout.write(self.style.SUCCESS("Creating users... Done!"))
        return users

    def _seed_books(self) -> list[Book]:
        self.stdout.write("Creating books...")
        catalog = [
            ("Dune", "Frank Herbert", "Science Fiction", Decimal("19.99"), Decimal("14.99")),
            ("Neuromancer", "William Gibson", "Science Fiction", Decimal("15.00"), Decimal("11.50")),
            ("Emma", "Jane Austen", "Classics", Decimal("9.99"), Decimal("7.49")),
            ("Middlemarch", "George Eliot", "Classics", Decimal("12.00"), Decimal("9.00")),
            ("The Hobbit", "J. R. R. Tolkien", "Fantasy", Decimal("14.99"), Decimal("10.99")),
            ("Earthsea", "Ursula K. Le Guin", "Fantasy", Decimal("13.50"), Decimal("9.99")),
            ("SICP", "Abelson & Sussman", "Computing", Decimal("55.00"), Decimal("49.00")),
            ("The Pragmatic Programmer", "Hunt & Thomas", "Computing", Decimal("42.00"), Decimal("35.99")),
        ]
        books: list[Book] = []
        for name, author, genre, mrp, discounted in catalog:
            book, _ = Book.objects.get_or_create(
                name=name,
                author=author,
                defaults={
                    "genre": genre,
                    "mrp": mrp,
                    "discounted_price": discounted,
                    "quantity": random.randint(5, 50),
                    "book_details": f"{name} by {author}.",
                },
            )
            books.append(book)
        self.stdout.write(self.style.SUCCESS("Creating books... Done!"))
        return books

    def _seed_addresses(self, users: list[User]) -> list[Address]:
        self.stdout.write("Creating addresses...")
        addresses: list[Address] = []
        for index, user in enumerate(users):
            address, _ = Address.objects.get_or_create(
                user=user,
                street=f"{12 + index} Library Lane",
                defaults={
                    "city": "Springfield",
                    "state": "Oregon",
                    "zip_code": f"97{index:03d}",
                    "country": "USA",
                    "address_type": AddressType.HOME,
                    "is_default": True,
                },
            )
            addresses.append(address)
        self.stdout.write(self.style.SUCCESS("Creating addresses... Done!"))
        return addresses

    def _seed_orders(
        self,
        users: list[User],
        books: list[Book],
        addresses: list[Address],
        count: int,
    ) -> int:
        self.stdout.write("Creating orders...")
        service = OrderService(
            order_repository=OrderDjangoRepository(),
            user_repository=UserDjangoRepository(),
            book_repository=BookDjangoRepository(),
            address_repository=AddressDjangoRepository(),
        )
        created = 0
        for _ in range(count):
            index = random.randrange(len(users))
            user, address = users[index], addresses[index]
            book = random.choice(books)
            book.refresh_from_db(fields=["quantity"])
            if book.quantity == 0:
                continue
            quantity = random.randint(1, min(3, book.quantity))
            dto = CreateOrderDTO(
                book_id=str(book.id),
                address_id=str(address.id),
                quantity=quantity,
                price_at_purchase=book.discounted_price,
                total_price=book.discounted_price * quantity,
            )
            ref = UserRef(user_id=user.id, email=user.email)
            try:
                order = service.create_order(ref, dto)
            except InvalidQuantity:
                continue
            created += 1
            if random.random() < 0.2:
                service.cancel_order(ref, str(order.id), notes="Seed cancellation")
        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return created
