"""User domain service.

Users authenticate with an opaque API token; only its SHA-256 hash is
stored.
"""

import hashlib
import secrets
from typing import Optional

from bookkeep.database.base import Database
from bookkeep.domain.entities import User as UserEntity
from bookkeep.domain.errors import AuthenticationError, ConflictError, ValidationError


def hash_api_token(token: str) -> str:
    """Return the stored form of an API token."""
    return hashlib.sha256(token.encode()).hexdigest()


def generate_api_token() -> str:
    """Generate a new random API token."""
    return f"bk_{secrets.token_hex(24)}"


class UserService:
    """Service for managing users and resolving API tokens."""

    def __init__(self, db: Database):
        """Initialize user service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_user(self, email: str) -> tuple[str, str]:
        """Create a user with a fresh API token.

        Args:
            email: User email address

        Returns:
            Tuple of (user ID, plaintext API token). The token is not stored
            and cannot be recovered later.

        Raises:
            ValidationError: If email is empty
            ConflictError: If a user with this email already exists
        """
        email = email.strip().lower()
        if not email or "@" not in email:
            raise ValidationError(f"Invalid email address '{email}'")

        if self.db.get_user_by_email(email) is not None:
            raise ConflictError(f"User with email '{email}' already exists")

        token = generate_api_token()
        user_id = self.db.create_user(email=email, api_token_hash=hash_api_token(token))
        return user_id, token

    def get_user(self, user_id: str) -> Optional[UserEntity]:
        """Get user by ID."""
        return self.db.get_user(user_id)

    def get_user_by_email(self, email: str) -> Optional[UserEntity]:
        """Get user by email address."""
        return self.db.get_user_by_email(email.strip().lower())

    def authenticate(self, token: Optional[str]) -> UserEntity:
        """Resolve an API token to its user.

        Raises:
            AuthenticationError: If the token is missing or unknown
        """
        if not token:
            raise AuthenticationError("Unauthorized")
        user = self.db.get_user_by_token_hash(hash_api_token(token))
        if user is None:
            raise AuthenticationError("Unauthorized")
        return user
