# tests/test_repositories/test_exchange_repository.py

import pytest
from datetime import timedelta
from core.sa.models import Exchange, ExchangeStatus, utcnow
from core.sa.repositories import ExchangeRepository

@pytest.fixture
def exchange_repo(db_session):
    return ExchangeRepository(db_session)

@pytest.fixture
def requested(exchange_repo, db_session, sample_book, alice, bob):
    exchange = exchange_repo.create(Exchange(
        book_id=sample_book.id,
        from_user_id=alice.id,
        to_user_id=bob.id,
        points_cost=30
    ))
    db_session.commit()
    return exchange

def test_create_defaults(requested):
    assert requested.status == ExchangeStatus.REQUESTED.value
    assert requested.points_escrowed == 0

def test_transition_from_expected_status(exchange_repo, db_session, requested):
    assert exchange_repo.transition(requested.id, ExchangeStatus.REQUESTED, ExchangeStatus.APPROVED)
    db_session.commit()
    assert exchange_repo.get_by_id(requested.id).status == ExchangeStatus.APPROVED.value

def test_transition_from_stale_status_updates_nothing(exchange_repo, db_session, requested):
    assert exchange_repo.transition(requested.id, ExchangeStatus.REQUESTED, ExchangeStatus.CANCELLED)
    db_session.commit()
    assert not exchange_repo.transition(requested.id, ExchangeStatus.REQUESTED, ExchangeStatus.APPROVED)
    assert exchange_repo.get_by_id(requested.id).status == ExchangeStatus.CANCELLED.value

def test_get_active_for_book(exchange_repo, db_session, requested, sample_book):
    assert exchange_repo.get_active_for_book(sample_book.id).id == requested.id
    exchange_repo.transition(requested.id, ExchangeStatus.REQUESTED, ExchangeStatus.REJECTED)
    db_session.commit()
    assert exchange_repo.get_active_for_book(sample_book.id) is None

def test_transfer_book_requires_current_owner(exchange_repo, db_session, sample_book, alice, bob, carol):
    assert not exchange_repo.transfer_book(sample_book.id, carol.id, bob.id)
    assert exchange_repo.transfer_book(sample_book.id, alice.id, bob.id)
    db_session.commit()
    db_session.refresh(sample_book)
    assert sample_book.current_owner_id == bob.id

def test_completed_between_since_either_direction(exchange_repo, db_session, requested, alice, bob, carol):
    exchange_repo.transition(
        requested.id, ExchangeStatus.REQUESTED, ExchangeStatus.COMPLETED, completed_at=utcnow()
    )
    db_session.commit()
    since = utcnow() - timedelta(days=7)
    assert exchange_repo.completed_between_since(alice.id, bob.id, since)
    assert exchange_repo.completed_between_since(bob.id, alice.id, since)
    assert not exchange_repo.completed_between_since(alice.id, carol.id, since)
    assert not exchange_repo.completed_between_since(alice.id, bob.id, utcnow() + timedelta(minutes=1))

def test_list_for_user_and_pending(exchange_repo, requested, alice, bob, carol):
    assert [e.id for e in exchange_repo.list_for_user(bob.id)] == [requested.id]
    assert [e.id for e in exchange_repo.list_for_user(alice.id)] == [requested.id]
    assert exchange_repo.list_for_user(carol.id) == []
    assert [e.id for e in exchange_repo.list_pending_for_owner(alice.id)] == [requested.id]
    assert exchange_repo.list_pending_for_owner(bob.id) == []
