"""Unit tests for RedisUserStore

Tests user storage operations with mocked Redis.
No external dependencies - the mock keeps keys in a plain dict.
"""

import json
import pytest
from unittest.mock import AsyncMock

from humhub_bridge.core.auth import UserConflictError, UserStoreError
from humhub_bridge.domain.models import LocalUser
from humhub_bridge.infrastructure.auth.user_store import RedisUserStore


@pytest.fixture
def redis_data():
    return {}


@pytest.fixture
def mock_redis(redis_data):
    """Mock Redis client backed by a dict"""

    async def fake_set(key, value, nx=False):
        if nx and key in redis_data:
            return None
        redis_data[key] = value
        return True

    async def fake_get(key):
        return redis_data.get(key)

    async def fake_delete(key):
        return 1 if redis_data.pop(key, None) is not None else 0

    async def fake_sadd(key, value):
        redis_data.setdefault(key, set()).add(value)
        return 1

    redis = AsyncMock()
    redis.set = AsyncMock(side_effect=fake_set)
    redis.get = AsyncMock(side_effect=fake_get)
    redis.delete = AsyncMock(side_effect=fake_delete)
    redis.sadd = AsyncMock(side_effect=fake_sadd)
    return redis


@pytest.fixture
def user_store(mock_redis):
    """Create user store with mocked Redis"""
    return RedisUserStore(mock_redis, realm="test")


@pytest.mark.unit
class TestAddUser:
    """Test user creation"""

    @pytest.mark.asyncio
    async def test_add_user_with_preferred_id(self, user_store, redis_data):
        """Happy path: add_user stores record and username index"""
        user = await user_store.add_user(username="Alice", user_id="g-1")

        assert user.user_id == "g-1"
        assert user.username == "Alice"
        assert user.enabled is False
        assert json.loads(redis_data["auth:test:user:g-1"])["username"] == "Alice"
        assert redis_data["auth:test:username:alice"] == "g-1"
        assert "g-1" in redis_data["auth:test:user_list"]

    @pytest.mark.asyncio
    async def test_add_user_generates_id(self, user_store):
        """Edge case: no preferred id, store assigns a UUID"""
        user = await user_store.add_user(username="carol")

        assert len(user.user_id) == 36

    @pytest.mark.asyncio
    async def test_add_user_duplicate_id(self, user_store):
        """Bad input: existing id raises UserConflictError"""
        await user_store.add_user(username="alice", user_id="g-1")

        with pytest.raises(UserConflictError, match="already exists"):
            await user_store.add_user(username="alice2", user_id="g-1")

    @pytest.mark.asyncio
    async def test_add_user_duplicate_username(self, user_store, redis_data):
        """Bad input: taken username raises and leaves no orphan record"""
        await user_store.add_user(username="alice", user_id="g-1")

        with pytest.raises(UserConflictError, match="Username"):
            await user_store.add_user(username="ALICE", user_id="g-2")

        assert "auth:test:user:g-2" not in redis_data

    @pytest.mark.asyncio
    async def test_add_user_empty_username(self, user_store):
        with pytest.raises(ValueError):
            await user_store.add_user(username="  ")

    @pytest.mark.asyncio
    async def test_add_user_redis_failure(self, user_store, mock_redis):
        mock_redis.set.side_effect = ConnectionError("redis down")

        with pytest.raises(UserStoreError, match="User creation failed"):
            await user_store.add_user(username="alice")


@pytest.mark.unit
class TestLookup:
    """Test user lookups"""

    @pytest.mark.asyncio
    async def test_get_user_by_username_case_insensitive(self, user_store):
        await user_store.add_user(username="Alice", user_id="g-1")

        user = await user_store.get_user_by_username("ALICE")

        assert user is not None
        assert user.user_id == "g-1"

    @pytest.mark.asyncio
    async def test_get_user_by_email(self, user_store):
        user = await user_store.add_user(username="alice", user_id="g-1")
        user.email = "Alice@X.com"
        await user_store.update_user(user)

        found = await user_store.get_user_by_email("alice@x.com")

        assert found.user_id == "g-1"
        assert found.email == "Alice@X.com"

    @pytest.mark.asyncio
    async def test_lookup_missing(self, user_store):
        assert await user_store.get_user_by_username("nobody") is None
        assert await user_store.get_user_by_email("nobody@x.com") is None
        assert await user_store.get_user_by_email("") is None

    @pytest.mark.asyncio
    async def test_lookup_redis_failure_returns_none(self, user_store, mock_redis):
        mock_redis.get.side_effect = ConnectionError("redis down")

        assert await user_store.get_user_by_username("alice") is None


@pytest.mark.unit
class TestUpdateUser:
    """Test user updates"""

    @pytest.mark.asyncio
    async def test_update_moves_email_index(self, user_store, redis_data):
        user = await user_store.add_user(username="alice", user_id="g-1")
        user.email = "old@x.com"
        await user_store.update_user(user)

        user.email = "new@x.com"
        user.first_name = "Alice"
        await user_store.update_user(user)

        assert "auth:test:email:old@x.com" not in redis_data
        assert redis_data["auth:test:email:new@x.com"] == "g-1"
        assert json.loads(redis_data["auth:test:user:g-1"])["first_name"] == "Alice"

    @pytest.mark.asyncio
    async def test_update_email_taken_by_other_user(self, user_store):
        alice = await user_store.add_user(username="alice", user_id="g-1")
        alice.email = "shared@x.com"
        await user_store.update_user(alice)
        bob = await user_store.add_user(username="bob", user_id="g-2")

        bob.email = "shared@x.com"
        with pytest.raises(UserConflictError, match="Email"):
            await user_store.update_user(bob)

    @pytest.mark.asyncio
    async def test_update_missing_user(self, user_store):
        with pytest.raises(UserStoreError, match="not found"):
            await user_store.update_user(LocalUser(user_id="ghost", username="ghost"))


@pytest.mark.unit
class TestPasswordCredential:
    """Test bcrypt credential handling"""

    @pytest.mark.asyncio
    async def test_set_and_validate_password(self, user_store, redis_data):
        user = await user_store.add_user(username="alice", user_id="g-1")

        await user_store.set_password(user, "pw")

        assert redis_data["auth:test:credential:g-1"].startswith("$2")
        assert "pw" != redis_data["auth:test:credential:g-1"]
        assert await user_store.validate_password(user, "pw") is True
        assert await user_store.validate_password(user, "PW") is False

    @pytest.mark.asyncio
    async def test_overwrite_password(self, user_store):
        user = await user_store.add_user(username="alice", user_id="g-1")
        await user_store.set_password(user, "old")

        await user_store.set_password(user, "new")

        assert await user_store.validate_password(user, "new") is True
        assert await user_store.validate_password(user, "old") is False

    @pytest.mark.asyncio
    async def test_long_password_not_truncated(self, user_store):
        user = await user_store.add_user(username="alice", user_id="g-1")
        base = "x" * 80
        await user_store.set_password(user, base + "a")

        assert await user_store.validate_password(user, base + "a") is True
        assert await user_store.validate_password(user, base + "b") is False

    @pytest.mark.asyncio
    async def test_validate_without_credential(self, user_store):
        user = await user_store.add_user(username="alice", user_id="g-1")

        assert await user_store.validate_password(user, "pw") is False

    @pytest.mark.asyncio
    async def test_set_password_failure_raises(self, user_store, mock_redis):
        user = await user_store.add_user(username="alice", user_id="g-1")
        mock_redis.set.side_effect = ConnectionError("redis down")

        with pytest.raises(UserStoreError, match="Credential update failed"):
            await user_store.set_password(user, "pw")
