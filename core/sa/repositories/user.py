from typing import Optional
from sqlalchemy import func, update
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from core.errors import ErrorKind, ReadloomError
from core.sa.models import User, SIGNUP_BONUS_POINTS

class UserRepository:
    """Repository for managing User entities."""

    def __init__(self, session: Session):
        """Initialize the repository with a database session.
        
        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    def create_user(
        self,
        email: str,
        password_hash: str,
        name: Optional[str] = None,
        points: int = SIGNUP_BONUS_POINTS,
        is_admin: bool = False
    ) -> User:
        """Create a new user.
        
        The row is flushed but not committed; the caller owns the transaction
        and rolls it back when this raises.

        Args:
            email: Email address, stored lower-cased
            password_hash: Salted password hash
            name: Optional display name
            points: Starting balance
            is_admin: Whether the account has admin rights
            
        Returns:
            The created User object
            
        Raises:
            ReadloomError: DuplicateEmail if the email is already registered
        """
        email = self.normalize_email(email)
        if self.get_by_email(email):
            raise ReadloomError(ErrorKind.DUPLICATE_EMAIL, "An account with this email already exists")

        user = User(
            email=email,
            password_hash=password_hash,
            name=name or None,
            points=points,
            is_admin=is_admin
        )
        self.session.add(user)
        try:
            self.session.flush()
        except IntegrityError:
            raise ReadloomError(ErrorKind.DUPLICATE_EMAIL, "An account with this email already exists")
        return user

    def get_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by their ID.
        
        Args:
            user_id: The ID of the user to retrieve
            
        Returns:
            The User object if found, None otherwise
        """
        return self.session.query(User).filter(User.id == user_id).one_or_none()

    def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email, case-insensitively."""
        return (
            self.session.query(User)
            .filter(func.lower(User.email) == self.normalize_email(email))
            .one_or_none()
        )

    def set_admin(self, user_id: str, is_admin: bool = True) -> bool:
        result = self.session.execute(
            update(User).where(User.id == user_id).values(is_admin=is_admin)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount > 0

