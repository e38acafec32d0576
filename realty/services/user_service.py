"""
User service layer implementing business logic for user operations.
Separates business logic from API routes and database operations.
"""

from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlmodel import Session, col, delete, select

from realty.core.security import get_password_hash, verify_password
from realty.models.blog_post import BlogPost
from realty.models.listing import Listing
from realty.models.user import User, UserRole, normalize_role
from realty.schemas.token import Identity
from realty.schemas.user import UserCreate


class UserService:
    """Service class for user-related operations."""

    @staticmethod
    def get_by_email(session: Session, email: str) -> Optional[User]:
        """
        Retrieve a user by email address.

        Args:
            session: Database session
            email: Email address to search for

        Returns:
            User if found, None otherwise
        """
        statement = select(User).where(User.email == email.strip().lower())
        return session.exec(statement).first()

    @staticmethod
    def get_by_id(session: Session, user_id: str) -> Optional[User]:
        """
        Retrieve a user by ID.

        Args:
            session: Database session
            user_id: User ID to search for

        Returns:
            User if found, None otherwise
        """
        return session.get(User, user_id)

    @staticmethod
    def list_all(session: Session) -> List[User]:
        """All users, newest first."""
        statement = select(User).order_by(col(User.created_at).desc())
        return list(session.exec(statement).all())

    @staticmethod
    def create(session: Session, user_create: UserCreate, role: UserRole = UserRole.AGENT) -> User:
        """
        Create a new user with hashed password.

        Args:
            session: Database session
            user_create: User creation data
            role: User role (defaults to AGENT)

        Returns:
            Created user instance
        """
        db_user = User(
            email=user_create.email.strip().lower(),
            name=user_create.name,
            hashed_password=get_password_hash(user_create.password),
            role=normalize_role(role) or UserRole.AGENT,
        )
        session.add(db_user)
        session.commit()
        session.refresh(db_user)
        return db_user

    @staticmethod
    def update(session: Session, user: User, name: str, email: str, role: UserRole) -> User:
        """Update profile fields and role."""
        user.name = name
        user.email = email.strip().lower()
        user.role = normalize_role(role) or user.role
        user.updated_at = datetime.now(timezone.utc)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    @staticmethod
    def set_password(session: Session, user: User, password: str) -> None:
        """Replace a user's password hash."""
        user.hashed_password = get_password_hash(password)
        user.updated_at = datetime.now(timezone.utc)
        session.add(user)
        session.commit()

    @staticmethod
    def email_taken(session: Session, email: str, exclude_user_id: Optional[str] = None) -> bool:
        """Whether another account already uses ``email``."""
        statement = select(User).where(User.email == email.strip().lower())
        if exclude_user_id is not None:
            statement = statement.where(User.id != exclude_user_id)
        return session.exec(statement).first() is not None

    @staticmethod
    def delete(session: Session, user: User) -> None:
        """Delete a user together with the listings and posts they own."""
        session.exec(delete(Listing).where(Listing.user_id == user.id))  # type: ignore[call-overload]
        session.exec(delete(BlogPost).where(BlogPost.user_id == user.id))  # type: ignore[call-overload]
        session.delete(user)
        session.commit()

    @staticmethod
    def authenticate(session: Session, email: str, password: str) -> Optional[User]:
        """
        Authenticate a user by email and password.

        Args:
            session: Database session
            email: User's email
            password: Plain text password

        Returns:
            User if authentication successful, None otherwise
        """
        user = UserService.get_by_email(session, email)
        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    @staticmethod
    def is_admin(user: Union[User, Identity]) -> bool:
        """
        Check if a user or a token identity has admin privileges.

        Args:
            user: Stored user or identity read from a session token

        Returns:
            True if user is admin, False otherwise
        """
        return normalize_role(user.role) == UserRole.ADMIN
