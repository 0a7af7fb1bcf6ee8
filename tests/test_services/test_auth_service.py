# tests/test_services/test_auth_service.py

import pytest
from core.errors import ErrorKind
from core.sa.models import User
from core.services.auth_service import AuthService, validate_email
from tests.utils import FakeEmailClient, TEST_PASSWORD

@pytest.fixture
def auth(db_session, fake_email):
    return AuthService(db_session, mailer=fake_email)

def test_signup_creates_user_with_bonus(auth, fake_email):
    result = auth.signup("New.Reader@Example.com", "hunter22", "New Reader")
    assert result.ok
    user = result.value
    assert user.email == "new.reader@example.com"
    assert user.points == 20
    assert user.password_hash != "hunter22"
    assert fake_email.sent == [("new.reader@example.com", "Welcome to Readloom!")]

def test_signup_duplicate_email(auth, db_session, alice):
    result = auth.signup("ALICE@example.com", "another1")
    assert not result.ok
    assert result.kind is ErrorKind.DUPLICATE_EMAIL
    assert db_session.query(User).filter(User.email == "alice@example.com").count() == 1

def test_signup_duplicate_caught_at_insert_rolls_back(auth, db_session, alice, monkeypatch):
    """A concurrent signup that slips past the lookup still maps to DuplicateEmail."""
    monkeypatch.setattr(auth.users, "get_by_email", lambda email: None)
    result = auth.signup("alice@example.com", "another1")
    assert result.kind is ErrorKind.DUPLICATE_EMAIL

    # the service rolled back, so the session is usable again
    assert db_session.query(User).count() == 1
    monkeypatch.undo()
    assert auth.signup("dora@example.com", "hunter22").ok

@pytest.mark.parametrize("email,password", [
    ("not-an-email", "hunter22"),
    ("reader@example.com", "short"),
    ("", "hunter22"),
])
def test_signup_validation(auth, email, password):
    result = auth.signup(email, password)
    assert result.kind is ErrorKind.VALIDATION

def test_signup_survives_email_failure(db_session):
    result = AuthService(db_session, mailer=FakeEmailClient(fail=True)).signup("reader@example.com", "hunter22")
    assert result.ok
    assert db_session.query(User).count() == 1

def test_authenticate(auth, alice):
    result = auth.authenticate("Alice@Example.com", TEST_PASSWORD)
    assert result.ok
    assert result.value.id == alice.id

def test_authenticate_wrong_password(auth, alice):
    assert auth.authenticate("alice@example.com", "wrong-password").kind is ErrorKind.UNAUTHENTICATED

def test_authenticate_unknown_email(auth):
    assert auth.authenticate("nobody@example.com", TEST_PASSWORD).kind is ErrorKind.UNAUTHENTICATED

def test_resolve(auth, alice):
    current = auth.resolve(alice.id)
    assert current.email == "alice@example.com"
    assert current.points == 100
    assert auth.resolve("missing") is None
    assert auth.resolve(None) is None

def test_promote(auth, bob):
    assert auth.promote("bob@example.com").ok
    assert auth.resolve(bob.id).is_admin
    assert auth.promote("nobody@example.com").kind is ErrorKind.NOT_FOUND

def test_validate_email():
    assert validate_email("a@b.co")
    assert not validate_email("a@b")
    assert not validate_email(None)
