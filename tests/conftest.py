# tests/conftest.py
import os
import sys

import pytest
from pathlib import Path
from sqlalchemy.sql import text
from sqlalchemy.orm import Session

# Add project root to Python path
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from core.sa.database import Database
from core.sa.models import Base, Book, ExchangePoint
from core.sa.repositories import UserRepository
from core.services.auth_service import hash_password
from tests.utils import (
    GUIDE_REPLY, TEST_PASSWORD, FakeEmailClient, FakeGeminiClient, FakeModerationClient, FakePaymentClient,
    FakeVideoClient
)

@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory):
    """Create a temporary directory for the test database."""
    test_dir = tmp_path_factory.mktemp("test_db")
    return str(test_dir / "test_readloom.db")

@pytest.fixture(scope="session")
def database(test_db_path):
    """Create a test database instance"""
    db = Database(f"sqlite:///{test_db_path}")

    # Drop all tables and recreate schema
    Base.metadata.drop_all(db.engine)
    Base.metadata.create_all(db.engine)

    yield db

    db.engine.dispose()
    try:
        os.remove(test_db_path)
    except OSError:
        pass  # Ignore errors if file doesn't exist

@pytest.fixture(scope="function")
def db_session(database):
    """Create a new database session for a test"""
    session: Session = database.get_session()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture(autouse=True)
def cleanup_db(db_session):
    """Clean up database tables before each test"""
    # Delete all data from tables in reverse order of dependencies
    for table in (
        "reports", "chat_messages", "forum_replies", "forum_posts", "points_credits",
        "exchanges", "exchange_points", "wishlist_entries", "book_history_entries", "reading_guides",
        "books", "users"
    ):
        db_session.execute(text(f"DELETE FROM {table}"))
    db_session.commit()
    yield
    db_session.rollback()

@pytest.fixture(scope="session")
def password_hash():
    """Hashing is slow; every fixture user shares one hash of TEST_PASSWORD."""
    return hash_password(TEST_PASSWORD)

@pytest.fixture
def make_user(db_session, password_hash):
    """Factory creating committed users."""
    def _make(email: str, points: int = 20, name: str = None, is_admin: bool = False):
        user = UserRepository(db_session).create_user(
            email=email,
            password_hash=password_hash,
            name=name,
            points=points,
            is_admin=is_admin
        )
        db_session.commit()
        return user
    return _make

@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com", points=100, name="Alice")

@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com", points=50, name="Bob")

@pytest.fixture
def carol(make_user):
    return make_user("carol@example.com", points=20)

@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", points=0, name="Admin", is_admin=True)

@pytest.fixture
def make_book(db_session):
    """Factory creating committed books with an explicit points cost."""
    def _make(owner, title: str = "The Left Hand of Darkness", author: str = "Ursula K. Le Guin", **fields):
        fields.setdefault("location", "Lahore")
        fields.setdefault("condition", "GOOD")
        fields.setdefault("points_cost", 30)
        fields.setdefault("points_computed", False)
        book = Book(title=title, author=author, current_owner_id=owner.id, **fields)
        db_session.add(book)
        db_session.commit()
        return book
    return _make

@pytest.fixture
def sample_book(make_book, alice):
    """A book owned by Alice costing 30 points."""
    return make_book(alice)

@pytest.fixture
def sample_exchange_point(db_session):
    point = ExchangePoint(
        name="Central Library",
        address="1 Mall Road",
        city="Lahore",
        country="Pakistan",
        latitude=31.5497,
        longitude=74.3436,
        is_active=True
    )
    db_session.add(point)
    db_session.commit()
    return point

@pytest.fixture
def fake_email():
    return FakeEmailClient()

@pytest.fixture
def fake_moderation():
    return FakeModerationClient()

@pytest.fixture
def fake_payments():
    return FakePaymentClient()

@pytest.fixture
def fake_video():
    return FakeVideoClient()

@pytest.fixture
def fake_gemini():
    return FakeGeminiClient(GUIDE_REPLY, GUIDE_REPLY)

@pytest.fixture
def client(database, fake_email, fake_moderation, fake_payments, fake_video, fake_gemini):
    """TestClient wired to the test database and fake external services."""
    from fastapi.testclient import TestClient
    from api import deps
    from api.main import app
    from core.sa.database import get_db

    def override_get_db():
        session = database.get_session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_email_client] = lambda: fake_email
    app.dependency_overrides[deps.get_moderation_client] = lambda: fake_moderation
    app.dependency_overrides[deps.get_payment_client] = lambda: fake_payments
    app.dependency_overrides[deps.get_video_client] = lambda: fake_video
    app.dependency_overrides[deps.get_gemini_client] = lambda: fake_gemini

    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()

