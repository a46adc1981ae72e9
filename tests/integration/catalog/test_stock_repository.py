"""Integration tests for ``BookDjangoRepository.adjust_stock``."""

from __future__ import annotations

from uuid import uuid4

import pytest
from django.core.exceptions import ValidationError

from modules.catalog.exceptions import BookNotFound, InsufficientStock
from modules.catalog.repositories import BookDjangoRepository

pytestmark = pytest.mark.integration


@pytest.fixture()
def repo():
    return BookDjangoRepository()


class TestAdjustStock:
    def test_decrement_returns_new_stock(self, repo, book):
        assert repo.adjust_stock(book.id, -4) == 6
        book.refresh_from_db()
        assert book.quantity == 6

    def test_decrement_to_zero(self, repo, book):
        assert repo.adjust_stock(book.id, -10) == 0

    def test_decrement_below_zero_is_refused(self, repo, book):
        with pytest.raises(InsufficientStock) as info:
            repo.adjust_stock(book.id, -11)

        assert info.value.available == 10
        book.refresh_from_db()
        assert book.quantity == 10

    def test_increment(self, repo, book):
        assert repo.adjust_stock(book.id, 5) == 15

    def test_soft_deleted_book_cannot_be_sold(self, repo, book):
        book.delete()
        with pytest.raises(BookNotFound):
            repo.adjust_stock(book.id, -1)

    def test_soft_deleted_book_can_be_restocked(self, repo, book):
        book.delete()
        assert repo.adjust_stock(book.id, 1) == 11

    def test_unknown_book(self, repo):
        missing = uuid4()
        with pytest.raises(BookNotFound, match=f"Book with ID {missing} not found."):
            repo.adjust_stock(missing, 1)

    @pytest.mark.parametrize("delta", [0, True, 1.5, "3"])
    def test_rejects_invalid_delta(self, repo, book, delta):
        with pytest.raises(ValidationError) as info:
            repo.adjust_stock(book.id, delta)
        assert "quantity" in info.value.message_dict


class TestGetById:
    def test_found(self, repo, book):
        assert repo.get_by_id(str(book.id)) == book

    def test_soft_deleted_is_hidden(self, repo, book):
        book.delete()
        assert repo.get_by_id(str(book.id)) is None

    def test_malformed_id(self, repo):
        assert repo.get_by_id("42") is None
