# tests/test_services/test_wishlist_service.py

import pytest
from core.errors import ErrorKind
from core.services.wishlist_service import WishlistService
from tests.utils import as_current

@pytest.fixture
def wishlist(db_session):
    return WishlistService(db_session)

def test_double_toggle_restores_membership_and_count(wishlist, sample_book, bob):
    user = as_current(bob)
    before = wishlist.count(sample_book.id)

    first = wishlist.toggle(user, sample_book.id).value
    assert first["wishlisted"] is True
    assert first["wishlist_count"] == before + 1

    second = wishlist.toggle(user, sample_book.id).value
    assert second["wishlisted"] is False
    assert second["wishlist_count"] == before
    assert not wishlist.is_wishlisted(bob.id, sample_book.id)

def test_toggle_missing_or_deleted_book(wishlist, make_book, alice, bob):
    deleted = make_book(alice, is_deleted=True)
    assert wishlist.toggle(as_current(bob), "missing").kind is ErrorKind.NOT_FOUND
    assert wishlist.toggle(as_current(bob), deleted.id).kind is ErrorKind.NOT_FOUND

def test_list_books_skips_deleted(wishlist, db_session, make_book, alice, bob):
    kept = make_book(alice, "Kept", "Author")
    removed = make_book(alice, "Removed", "Author")
    user = as_current(bob)
    wishlist.toggle(user, kept.id)
    wishlist.toggle(user, removed.id)
    removed.is_deleted = True
    db_session.commit()

    assert [b.id for b in wishlist.list_books(user).value] == [kept.id]
