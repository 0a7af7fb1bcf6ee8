# tests/test_repositories/test_book_repository.py

import pytest
from datetime import timedelta
from core.sa.models import WishlistEntry, utcnow
from core.sa.repositories import BookRepository

@pytest.fixture
def book_repo(db_session):
    return BookRepository(db_session)

@pytest.fixture
def catalog(make_book, alice, bob):
    """Three listings with distinct creation times; one deleted, one unavailable."""
    now = utcnow()
    dune = make_book(alice, "Dune", "Frank Herbert", location="Lahore", created_at=now - timedelta(days=3))
    emma = make_book(bob, "Emma", "Jane Austen", location="Karachi", condition="FAIR",
                     is_available=False, created_at=now - timedelta(days=2))
    gone = make_book(alice, "Gone Book", "Someone", is_deleted=True, created_at=now - timedelta(days=1))
    return dune, emma, gone

def test_search_excludes_deleted_newest_first(book_repo, catalog):
    dune, emma, _ = catalog
    assert [b.id for b in book_repo.search_books()] == [emma.id, dune.id]
    assert book_repo.count_books() == 2

def test_search_matches_title_or_author_case_insensitive(book_repo, catalog):
    dune, emma, _ = catalog
    assert [b.id for b in book_repo.search_books(search="HERBERT")] == [dune.id]
    assert [b.id for b in book_repo.search_books(search="emm")] == [emma.id]

def test_filter_location_and_condition(book_repo, catalog):
    dune, emma, _ = catalog
    assert [b.id for b in book_repo.search_books(location="karach")] == [emma.id]
    assert [b.id for b in book_repo.search_books(condition="GOOD")] == [dune.id]

def test_available_only(book_repo, catalog):
    dune, _, _ = catalog
    assert [b.id for b in book_repo.search_books(available_only=True)] == [dune.id]
    assert book_repo.count_books(available_only=True) == 1

def test_pagination(book_repo, catalog):
    dune, emma, _ = catalog
    assert [b.id for b in book_repo.search_books(limit=1, offset=1)] == [dune.id]

def test_list_by_owner_include_deleted(book_repo, catalog, alice):
    assert len(book_repo.list_by_owner(alice.id)) == 1
    assert len(book_repo.list_by_owner(alice.id, include_deleted=True)) == 2

def test_count_copies_ignores_case_and_deleted(book_repo, make_book, alice, bob):
    make_book(alice, "Dune", "Frank Herbert")
    make_book(bob, "DUNE", "frank herbert")
    make_book(bob, "Dune", "Frank Herbert", is_deleted=True)
    assert book_repo.count_copies(" dune ", "Frank Herbert") == 2

def test_wishlist_count(book_repo, db_session, sample_book, bob, carol):
    db_session.add_all([
        WishlistEntry(user_id=bob.id, book_id=sample_book.id),
        WishlistEntry(user_id=carol.id, book_id=sample_book.id),
    ])
    db_session.commit()
    assert book_repo.wishlist_count(sample_book.id) == 2

def test_delete_cascades_wishlist(book_repo, db_session, sample_book, bob):
    db_session.add(WishlistEntry(user_id=bob.id, book_id=sample_book.id))
    db_session.commit()

    book_repo.delete(sample_book)
    db_session.commit()
    assert db_session.query(WishlistEntry).count() == 0
