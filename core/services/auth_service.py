# core/services/auth_service.py
import logging
import re
from typing import Optional
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash, check_password_hash
from core.clients.mailer import EmailClient
from core.context import CurrentUser
from core.errors import ErrorKind, ExternalServiceError, ReadloomError, returns_result
from core.sa.models import User
from core.sa.repositories import UserRepository
from core.services.base import TransactionalService

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

# Compared against when the email is unknown so login timing does not reveal it
_DUMMY_HASH = generate_password_hash("readloom-timing-equalizer")

def hash_password(password: str) -> str:
    return generate_password_hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)

def validate_email(email: Optional[str]) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email.strip()) is not None

def validate_password(password: Optional[str]) -> Optional[str]:
    """Return an error message, or None when the password is acceptable"""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    return None

class AuthService(TransactionalService):
    def __init__(self, session: Session, mailer: Optional[EmailClient] = None):
        super().__init__(session)
        self.users = UserRepository(session)
        self.mailer = mailer

    @returns_result
    def signup(self, email: str, password: str, name: Optional[str] = None) -> User:
        """Register an account with the signup bonus.

        A duplicate email still pays for one hash computation before failing.
        """
        if not email or not password:
            raise ReadloomError(ErrorKind.VALIDATION, "Email and password are required")
        if not validate_email(email):
            raise ReadloomError(ErrorKind.VALIDATION, "Invalid email format")
        password_error = validate_password(password)
        if password_error:
            raise ReadloomError(ErrorKind.VALIDATION, password_error)

        if self.users.get_by_email(email):
            hash_password(password)
            raise ReadloomError(ErrorKind.DUPLICATE_EMAIL, "An account with this email already exists")

        with self.transaction():
            user = self.users.create_user(
                email=email,
                password_hash=hash_password(password),
                name=(name or "").strip() or None
            )
        logger.info(f"Created user {user.id}")

        self._send_welcome(user)
        return user

    def _send_welcome(self, user: User) -> None:
        if self.mailer is None:
            return
        try:
            self.mailer.send_welcome_email(user.email, user.name)
        except ExternalServiceError as e:
            logger.error(f"Failed to send welcome email to user {user.id}: {e}")

    @returns_result
    def authenticate(self, email: str, password: str) -> User:
        if not email or not password:
            raise ReadloomError(ErrorKind.VALIDATION, "Email and password are required")

        user = self.users.get_by_email(email)
        if user is None:
            verify_password(password, _DUMMY_HASH)
            raise ReadloomError(ErrorKind.UNAUTHENTICATED, "Invalid email or password")
        if not verify_password(password, user.password_hash):
            raise ReadloomError(ErrorKind.UNAUTHENTICATED, "Invalid email or password")
        return user

    def resolve(self, user_id: Optional[str]) -> Optional[CurrentUser]:
        """Load the identity behind a session, or None if it no longer exists"""
        if not user_id:
            return None
        user = self.users.get_by_id(user_id)
        return CurrentUser.from_user(user) if user else None

    @returns_result
    def create_admin(self, email: str, password: str, name: Optional[str] = None) -> User:
        if not validate_email(email):
            raise ReadloomError(ErrorKind.VALIDATION, "Invalid email format")
        password_error = validate_password(password)
        if password_error:
            raise ReadloomError(ErrorKind.VALIDATION, password_error)
        with self.transaction():
            user = self.users.create_user(
                email=email,
                password_hash=hash_password(password),
                name=name,
                is_admin=True
            )
        logger.info(f"Created admin {user.id}")
        return user

    @returns_result
    def promote(self, email: str) -> User:
        user = self.users.get_by_email(email)
        if user is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "User not found")
        with self.transaction():
            self.users.set_admin(user.id, True)
        return user
