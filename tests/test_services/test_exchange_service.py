# tests/test_services/test_exchange_service.py

import pytest
from datetime import timedelta
from core.errors import ErrorKind
from core.sa.models import Exchange, ExchangeStatus, PointsCredit, utcnow
from core.sa.repositories import PointsRepository
from core.services.exchange_service import ExchangeService
from sqlalchemy.exc import IntegrityError
from tests.utils import FakeEmailClient, as_current

@pytest.fixture
def exchanges(db_session):
    return ExchangeService(db_session)

@pytest.fixture
def balances(db_session):
    repo = PointsRepository(db_session)

    def _balances(*users):
        return tuple(repo.get_balance(u.id) for u in users)
    return _balances

@pytest.fixture
def requested(exchanges, sample_book, bob):
    return exchanges.request_exchange(as_current(bob), sample_book.id).value

@pytest.fixture
def approved(exchanges, requested, alice):
    return exchanges.approve_exchange(requested.id, as_current(alice)).value

def test_full_exchange_scenario(exchanges, db_session, sample_book, alice, bob, balances):
    """A (100) lists X at 30; B (50) requests, A approves, completion moves book and points."""
    exchange = exchanges.request_exchange(as_current(bob), sample_book.id).value
    assert exchange.status == "REQUESTED"
    assert balances(alice, bob) == (100, 50)

    exchange = exchanges.approve_exchange(exchange.id, as_current(alice)).value
    assert exchange.status == "APPROVED"
    assert exchange.points_escrowed == 30
    assert balances(alice, bob) == (100, 20)

    exchange = exchanges.complete_exchange(exchange.id, as_current(bob)).value
    assert exchange.status == "COMPLETED"
    assert exchange.completed_at is not None
    assert balances(alice, bob) == (130, 20)

    db_session.refresh(sample_book)
    db_session.refresh(bob)
    assert sample_book.current_owner_id == bob.id
    assert sample_book.is_available
    assert bob.escrow_points == 0
    assert db_session.query(PointsCredit).filter_by(source_ref=f"exchange:{exchange.id}").count() == 1

def test_request_snapshots_cost_and_point(exchanges, sample_book, sample_exchange_point, bob, alice):
    exchange = exchanges.request_exchange(as_current(bob), sample_book.id, sample_exchange_point.id).value
    assert exchange.from_user_id == alice.id
    assert exchange.to_user_id == bob.id
    assert exchange.points_cost == 30
    assert exchange.exchange_point_id == sample_exchange_point.id

def test_request_unavailable_book(exchanges, make_book, alice, bob):
    unavailable = make_book(alice, is_available=False)
    deleted = make_book(alice, "Other", "Author", is_deleted=True)
    assert exchanges.request_exchange(as_current(bob), unavailable.id).kind is ErrorKind.NOT_AVAILABLE
    assert exchanges.request_exchange(as_current(bob), deleted.id).kind is ErrorKind.NOT_AVAILABLE

def test_request_book_with_active_exchange(exchanges, requested, sample_book, carol, db_session):
    carol.points = 100
    db_session.commit()
    assert exchanges.request_exchange(as_current(carol), sample_book.id).kind is ErrorKind.NOT_AVAILABLE

def test_request_own_book(exchanges, sample_book, alice):
    assert exchanges.request_exchange(as_current(alice), sample_book.id).kind is ErrorKind.SELF_EXCHANGE

def test_request_missing_book(exchanges, bob):
    assert exchanges.request_exchange(as_current(bob), "missing").kind is ErrorKind.NOT_FOUND

def test_request_insufficient_balance(exchanges, sample_book, carol):
    result = exchanges.request_exchange(as_current(carol), sample_book.id)
    assert result.kind is ErrorKind.INSUFFICIENT_BALANCE

def test_request_inactive_exchange_point(exchanges, db_session, sample_book, sample_exchange_point, bob):
    sample_exchange_point.is_active = False
    db_session.commit()
    result = exchanges.request_exchange(as_current(bob), sample_book.id, sample_exchange_point.id)
    assert result.kind is ErrorKind.NOT_FOUND

def test_request_after_recent_exchange_between_same_users(exchanges, db_session, make_book, alice, bob):
    first = make_book(alice, "First", "Author")
    db_session.add(Exchange(
        book_id=first.id, from_user_id=bob.id, to_user_id=alice.id, points_cost=10,
        status=ExchangeStatus.COMPLETED.value, completed_at=utcnow() - timedelta(days=2)
    ))
    db_session.commit()
    second = make_book(alice, "Second", "Author")
    assert exchanges.request_exchange(as_current(bob), second.id).kind is ErrorKind.FORBIDDEN

def test_request_allowed_after_window(exchanges, db_session, make_book, alice, bob):
    first = make_book(alice, "First", "Author")
    db_session.add(Exchange(
        book_id=first.id, from_user_id=alice.id, to_user_id=bob.id, points_cost=10,
        status=ExchangeStatus.COMPLETED.value, completed_at=utcnow() - timedelta(days=8)
    ))
    db_session.commit()
    second = make_book(alice, "Second", "Author")
    assert exchanges.request_exchange(as_current(bob), second.id).ok

def test_approve_requires_owner(exchanges, requested, bob, carol, admin):
    assert exchanges.approve_exchange(requested.id, as_current(bob)).kind is ErrorKind.FORBIDDEN
    assert exchanges.approve_exchange(requested.id, as_current(carol)).kind is ErrorKind.FORBIDDEN
    assert exchanges.approve_exchange(requested.id, as_current(admin)).ok

def test_approve_insufficient_balance_rolls_back(exchanges, db_session, requested, alice, bob, balances):
    PointsRepository(db_session).debit(bob.id, 40)
    db_session.commit()

    result = exchanges.approve_exchange(requested.id, as_current(alice))
    assert result.kind is ErrorKind.INSUFFICIENT_BALANCE
    assert exchanges.exchanges.get_by_id(requested.id).status == "REQUESTED"
    assert balances(bob) == (10,)

def test_approve_unavailable_book(exchanges, db_session, requested, sample_book, alice):
    sample_book.is_available = False
    db_session.commit()
    assert exchanges.approve_exchange(requested.id, as_current(alice)).kind is ErrorKind.NOT_AVAILABLE

def test_approve_twice(exchanges, approved, alice):
    assert exchanges.approve_exchange(approved.id, as_current(alice)).kind is ErrorKind.INVALID_TRANSITION

def test_reject_releases_escrow(exchanges, approved, alice, bob, balances):
    result = exchanges.reject_exchange(approved.id, as_current(alice))
    assert result.value.status == "REJECTED"
    assert result.value.points_escrowed == 0
    assert balances(bob) == (50,)

def test_reject_requires_owner(exchanges, requested, bob):
    assert exchanges.reject_exchange(requested.id, as_current(bob)).kind is ErrorKind.FORBIDDEN

def test_cancel_requested(exchanges, requested, alice, bob, balances):
    assert exchanges.cancel_exchange(requested.id, as_current(alice)).kind is ErrorKind.FORBIDDEN
    assert exchanges.cancel_exchange(requested.id, as_current(bob)).value.status == "CANCELLED"
    assert balances(bob) == (50,)

def test_cancel_approved_releases_escrow(exchanges, approved, bob, balances, db_session):
    assert exchanges.cancel_exchange(approved.id, as_current(bob)).value.status == "CANCELLED"
    db_session.refresh(bob)
    assert (bob.points, bob.escrow_points) == (50, 0)

@pytest.mark.parametrize("terminal", ["reject", "cancel", "complete"])
def test_terminal_exchanges_reject_transitions(exchanges, approved, alice, bob, terminal):
    actor = bob if terminal == "cancel" else alice
    assert getattr(exchanges, f"{terminal}_exchange")(approved.id, as_current(actor)).ok
    status = exchanges.exchanges.get_by_id(approved.id).status

    for action, user in (("approve", alice), ("reject", alice), ("cancel", bob), ("complete", alice)):
        result = getattr(exchanges, f"{action}_exchange")(approved.id, as_current(user))
        assert result.kind is ErrorKind.INVALID_TRANSITION
    assert exchanges.exchanges.get_by_id(approved.id).status == status

def test_complete_requires_approved(exchanges, requested, alice):
    assert exchanges.complete_exchange(requested.id, as_current(alice)).kind is ErrorKind.INVALID_TRANSITION

def test_complete_requires_party(exchanges, approved, carol, admin):
    assert exchanges.complete_exchange(approved.id, as_current(carol)).kind is ErrorKind.FORBIDDEN
    assert exchanges.complete_exchange(approved.id, as_current(admin)).ok

def test_complete_is_atomic(exchanges, db_session, approved, sample_book, alice, bob, carol, balances):
    """If ownership cannot move, no balance or status changes either."""
    sample_book.current_owner_id = carol.id
    db_session.commit()

    result = exchanges.complete_exchange(approved.id, as_current(alice))
    assert result.kind is ErrorKind.INVALID_TRANSITION

    db_session.refresh(bob)
    assert exchanges.exchanges.get_by_id(approved.id).status == "APPROVED"
    assert balances(alice, bob) == (100, 20)
    assert bob.escrow_points == 30
    assert db_session.query(PointsCredit).count() == 0

def test_list_user_and_pending(exchanges, requested, alice, bob, carol):
    assert [e.id for e in exchanges.list_user_exchanges(as_current(bob)).value] == [requested.id]
    assert [e.id for e in exchanges.list_pending_requests(as_current(alice)).value] == [requested.id]
    assert exchanges.list_pending_requests(as_current(carol)).value == []

def test_concurrent_requests_leave_one_active_exchange(database, db_session, make_book, alice, bob, carol):
    """Two requests that both pass the availability check: the second insert loses."""
    book = make_book(alice, points_cost=10)
    service = ExchangeService(db_session)
    original_create = service.exchanges.create
    competing = {}

    def create_after_competitor(exchange):
        competitor_session = database.get_session()
        try:
            competing["result"] = ExchangeService(competitor_session).request_exchange(as_current(carol), book.id)
        finally:
            competitor_session.close()
        return original_create(exchange)

    service.exchanges.create = create_after_competitor
    result = service.request_exchange(as_current(bob), book.id)

    assert competing["result"].ok
    assert result.kind is ErrorKind.NOT_AVAILABLE

    active = (
        db_session.query(Exchange)
        .filter(Exchange.book_id == book.id, Exchange.status.in_(["REQUESTED", "APPROVED"]))
        .all()
    )
    assert [(e.to_user_id, e.status) for e in active] == [(carol.id, "REQUESTED")]

def test_active_exchange_index_rejects_second_row(db_session, sample_book, alice, bob, carol):
    for requester in (bob, carol):
        db_session.add(Exchange(
            book_id=sample_book.id,
            from_user_id=alice.id,
            to_user_id=requester.id,
            status=ExchangeStatus.REQUESTED.value,
            points_cost=30
        ))
    with pytest.raises(IntegrityError):
        db_session.flush()
    db_session.rollback()

def test_closed_exchanges_do_not_block_new_requests(exchanges, requested, sample_book, alice, carol, db_session):
    exchanges.reject_exchange(requested.id, as_current(alice))
    carol.points = 100
    db_session.commit()
    assert exchanges.request_exchange(as_current(carol), sample_book.id).ok

def test_complete_emails_both_parties(db_session, sample_book, sample_exchange_point, alice, bob):
    mailer = FakeEmailClient()
    service = ExchangeService(db_session, mailer=mailer)
    exchange = service.request_exchange(as_current(bob), sample_book.id, sample_exchange_point.id).value
    service.approve_exchange(exchange.id, as_current(alice))
    assert mailer.sent == []

    assert service.complete_exchange(exchange.id, as_current(bob)).ok
    assert mailer.sent == [
        ("bob@example.com", f"Exchange completed: {sample_book.title}"),
        ("alice@example.com", f"Your book was exchanged: {sample_book.title}"),
    ]

def test_complete_survives_email_failure(db_session, approved, sample_book, bob):
    service = ExchangeService(db_session, mailer=FakeEmailClient(fail=True))
    result = service.complete_exchange(approved.id, as_current(bob))
    assert result.ok
    assert result.value.status == "COMPLETED"
    db_session.refresh(sample_book)
    assert sample_book.current_owner_id == bob.id
