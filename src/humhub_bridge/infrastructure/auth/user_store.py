"""User Storage System

Purpose: Local identity store backed by Redis

This module provides the local user database the decision pipeline checks
before falling back to HumHub. It handles user lookup, creation, profile
updates and bcrypt password credentials.

Key Features:
- Lookup by username or email (case-insensitive)
- Caller-chosen user ids (HumHub guid) with atomic uniqueness checks
- Password credential stored apart from the profile record
- One key namespace per realm

Storage Schema:
- auth:{realm}:user:{user_id} -> {user_json}
- auth:{realm}:username:{username} -> {user_id}
- auth:{realm}:email:{email} -> {user_id}
- auth:{realm}:credential:{user_id} -> {bcrypt_hash}
- auth:{realm}:user_list -> {user_id, ...}
"""

import base64
import hashlib
import json
import logging
import uuid
from typing import Optional

import bcrypt
from redis.asyncio import Redis

from humhub_bridge.core.auth.store import LocalIdentityStore, UserConflictError, UserStoreError
from humhub_bridge.domain.models import LocalUser

logger = logging.getLogger(__name__)


class RedisUserStore(LocalIdentityStore):
    """Redis-backed local identity store

    Profile records and password credentials are separate keys, so a
    profile write and a credential write are two independent operations.
    """

    def __init__(self, redis_client: Redis, realm: str = "master"):
        """Initialize user store

        Args:
            redis_client: Redis connection for user storage
            realm: Namespace for all keys written by this store
        """
        self.redis = redis_client
        self.realm = realm

        # Redis key patterns
        prefix = f"auth:{realm}"
        self.user_key_pattern = prefix + ":user:{}"
        self.username_key_pattern = prefix + ":username:{}"
        self.email_key_pattern = prefix + ":email:{}"
        self.credential_key_pattern = prefix + ":credential:{}"
        self.user_list_key = prefix + ":user_list"

    async def get_user(self, user_id: str) -> Optional[LocalUser]:
        """Get user by ID

        Args:
            user_id: User identifier

        Returns:
            LocalUser if found, None otherwise
        """
        try:
            if not user_id:
                return None

            user_key = self.user_key_pattern.format(user_id)
            user_data = await self._redis_get(user_key)

            if not user_data:
                return None

            return LocalUser.from_dict(json.loads(user_data))

        except Exception as e:
            logger.error(f"Failed to get user {user_id}: {e}")
            return None

    async def get_user_by_username(self, username: str) -> Optional[LocalUser]:
        """Get user by username

        Args:
            username: Username to search for

        Returns:
            LocalUser if found, None otherwise
        """
        if not username:
            return None

        username_key = self.username_key_pattern.format(username.lower())
        user_id = await self._redis_get(username_key)

        if not user_id:
            return None

        return await self.get_user(user_id)

    async def get_user_by_email(self, email: str) -> Optional[LocalUser]:
        """Get user by email address

        Args:
            email: Email address to search for

        Returns:
            LocalUser if found, None otherwise
        """
        if not email:
            return None

        email_key = self.email_key_pattern.format(email.lower())
        user_id = await self._redis_get(email_key)

        if not user_id:
            return None

        return await self.get_user(user_id)

    async def add_user(self, username: str, user_id: Optional[str] = None) -> LocalUser:
        """Create a new, empty user

        The user key and the username index are claimed with SET NX, so two
        concurrent imports of the same HumHub user cannot both succeed.

        Args:
            username: Unique username
            user_id: Preferred identifier (random UUID when None)

        Returns:
            Created LocalUser

        Raises:
            ValueError: If username is empty
            UserConflictError: If the id or username is already taken
            UserStoreError: If the write fails
        """
        if not username or not username.strip():
            raise ValueError("Username is required")

        user_id = user_id or str(uuid.uuid4())
        user = LocalUser(user_id=user_id, username=username)

        user_key = self.user_key_pattern.format(user_id)
        username_key = self.username_key_pattern.format(username.lower())

        try:
            if not await self._redis_set(user_key, json.dumps(user.to_dict()), nx=True):
                raise UserConflictError(f"User id '{user_id}' already exists")

            if not await self._redis_set(username_key, user_id, nx=True):
                await self._redis_delete(user_key)
                raise UserConflictError(f"Username '{username}' already exists")

            await self._redis_sadd(self.user_list_key, user_id)

        except UserStoreError:
            raise
        except Exception as e:
            logger.error(f"Failed to create user '{username}': {e}")
            raise UserStoreError(f"User creation failed: {e}") from e

        logger.info(f"Created user {user_id} with username '{username}' in realm '{self.realm}'")
        return user

    async def update_user(self, user: LocalUser) -> LocalUser:
        """Update existing user

        Args:
            user: LocalUser with updated information

        Returns:
            Updated LocalUser

        Raises:
            UserStoreError: If user not found or the write fails
            UserConflictError: If the new email belongs to another user
        """
        existing_user = await self.get_user(user.user_id)
        if not existing_user:
            raise UserStoreError(f"User {user.user_id} not found")

        email_changed = (user.email or "").lower() != (existing_user.email or "").lower()
        username_changed = user.username.lower() != existing_user.username.lower()

        # Check email uniqueness
        if email_changed and user.email:
            owner = await self.get_user_by_email(user.email)
            if owner and owner.user_id != user.user_id:
                raise UserConflictError(f"Email '{user.email}' already exists")

        try:
            if username_changed:
                new_username_key = self.username_key_pattern.format(user.username.lower())
                if not await self._redis_set(new_username_key, user.user_id, nx=True):
                    raise UserConflictError(f"Username '{user.username}' already exists")
                await self._redis_delete(
                    self.username_key_pattern.format(existing_user.username.lower())
                )

            user_key = self.user_key_pattern.format(user.user_id)
            await self._redis_set(user_key, json.dumps(user.to_dict()))

            # Update email index if changed
            if email_changed:
                if existing_user.email:
                    await self._redis_delete(
                        self.email_key_pattern.format(existing_user.email.lower())
                    )
                if user.email:
                    await self._redis_set(
                        self.email_key_pattern.format(user.email.lower()), user.user_id
                    )

        except UserStoreError:
            raise
        except Exception as e:
            logger.error(f"Failed to update user {user.user_id}: {e}")
            raise UserStoreError(f"User update failed: {e}") from e

        logger.info(f"Updated user {user.user_id}")
        return user

    async def validate_password(self, user: LocalUser, password: str) -> bool:
        """Check password against the stored bcrypt credential

        Returns:
            False when the user has no credential or it does not match
        """
        credential_key = self.credential_key_pattern.format(user.user_id)
        password_hash = await self._redis_get(credential_key)

        if not password_hash:
            return False

        try:
            return bcrypt.checkpw(self._prepare(password), password_hash.encode())
        except ValueError as e:
            logger.error(f"Stored credential for user {user.user_id} is unreadable: {e}")
            return False

    async def set_password(self, user: LocalUser, password: str) -> None:
        """Replace the bcrypt credential for user

        Raises:
            UserStoreError: If the credential write fails
        """
        password_hash = bcrypt.hashpw(self._prepare(password), bcrypt.gensalt()).decode()
        credential_key = self.credential_key_pattern.format(user.user_id)

        try:
            await self._redis_set(credential_key, password_hash)
        except Exception as e:
            logger.error(f"Failed to update password credential for user {user.user_id}: {e}")
            raise UserStoreError(f"Credential update failed: {e}") from e

        logger.info(f"Updated password credential for user {user.username}")

    @staticmethod
    def _prepare(password: str) -> bytes:
        """Digest the password so bcrypt's 72 byte input limit never truncates it"""
        return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())

    # Redis async wrapper methods
    async def _redis_set(self, key: str, value: str, nx: bool = False):
        """Set Redis key (returns falsy if nx and key exists)"""
        try:
            return await self.redis.set(key, value, nx=nx)
        except Exception as e:
            logger.error(f"Redis SET failed for key {key}: {e}")
            raise

    async def _redis_get(self, key: str) -> Optional[str]:
        """Get Redis key value"""
        try:
            result = await self.redis.get(key)
            return result if result else None
        except Exception as e:
            logger.error(f"Redis GET failed for key {key}: {e}")
            return None

    async def _redis_delete(self, key: str) -> None:
        """Delete Redis key"""
        try:
            return await self.redis.delete(key)
        except Exception as e:
            logger.error(f"Redis DELETE failed for key {key}: {e}")

    async def _redis_sadd(self, key: str, value: str) -> None:
        """Add to Redis set"""
        try:
            return await self.redis.sadd(key, value)
        except Exception as e:
            logger.error(f"Redis SADD failed for key {key}: {e}")

