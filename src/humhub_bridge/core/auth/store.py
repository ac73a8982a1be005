"""Local identity store interface.

This module defines the contract the decision pipeline and the reconciler
need from the local user database. The storage engine and password hashing
live behind it.
"""

from abc import ABC, abstractmethod
from typing import Optional

from humhub_bridge.domain.models import LocalUser


class UserStoreError(Exception):
    """A local identity store write failed."""
    pass


class UserConflictError(UserStoreError):
    """A user with the same id, username or email already exists."""
    pass


class LocalIdentityStore(ABC):
    """Abstract interface for the local identity store.

    An instance is bound to one realm; lookups and writes never cross realms.
    """

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[LocalUser]:
        """Find a user by exact (case-insensitive) username.

        Args:
            username: Username to search for

        Returns:
            LocalUser if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[LocalUser]:
        """Find a user by email address.

        Args:
            email: Email address to search for

        Returns:
            LocalUser if found, None otherwise
        """
        pass

    @abstractmethod
    async def add_user(self, username: str, user_id: Optional[str] = None) -> LocalUser:
        """Create and persist a new, empty user record.

        Args:
            username: Unique username
            user_id: Preferred identifier; the store assigns one when None

        Returns:
            Created LocalUser (disabled, unverified, no credential)

        Raises:
            UserConflictError: If the id or username is already taken
        """
        pass

    @abstractmethod
    async def update_user(self, user: LocalUser) -> LocalUser:
        """Persist profile fields of an existing user.

        Raises:
            UserStoreError: If the user does not exist or the write fails
            UserConflictError: If the new email belongs to another user
        """
        pass

    @abstractmethod
    async def validate_password(self, user: LocalUser, password: str) -> bool:
        """Check a plaintext password against the stored credential.

        Returns:
            True if the user has a password credential matching password
        """
        pass

    @abstractmethod
    async def set_password(self, user: LocalUser, password: str) -> None:
        """Replace the user's password credential.

        Raises:
            UserStoreError: If the credential write fails
        """
        pass
