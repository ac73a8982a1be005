"""
Pytest configuration and fixtures for HumHub bridge authentication tests.

Provides fixtures for:
- In-memory local identity store
- Mocked HumHub verifier
- HumHub profiles and existing local users
- Test HTTP client with the pipeline dependency overridden
"""

import copy
from typing import AsyncGenerator, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from humhub_bridge.core.auth import (
    AuthenticationPipeline,
    HumHubCredentialVerifier,
    LocalIdentityStore,
    UserConflictError,
    UserStoreError,
)
from humhub_bridge.domain.models import LocalUser, RemoteIdentityProfile


class InMemoryUserStore(LocalIdentityStore):
    """Dict-backed store that hands out copies, like a real database would.

    Every call is recorded in ``calls`` so tests can assert which store
    operations ran.
    """

    def __init__(self):
        self.users: Dict[str, LocalUser] = {}
        self.passwords: Dict[str, str] = {}
        self.calls: List[Tuple[str, str]] = []
        self._next_id = 1

    def seed(self, user: LocalUser, password: Optional[str] = None) -> LocalUser:
        self.users[user.user_id] = copy.deepcopy(user)
        if password is not None:
            self.passwords[user.user_id] = password
        return user

    def stored(self, user_id: str) -> LocalUser:
        return self.users[user_id]

    async def get_user_by_username(self, username: str) -> Optional[LocalUser]:
        self.calls.append(("get_user_by_username", username))
        for user in self.users.values():
            if user.username.lower() == username.lower():
                return copy.deepcopy(user)
        return None

    async def get_user_by_email(self, email: str) -> Optional[LocalUser]:
        self.calls.append(("get_user_by_email", email))
        for user in self.users.values():
            if user.email and user.email.lower() == email.lower():
                return copy.deepcopy(user)
        return None

    async def add_user(self, username: str, user_id: Optional[str] = None) -> LocalUser:
        self.calls.append(("add_user", username))
        if user_id is None:
            user_id = f"generated-{self._next_id}"
            self._next_id += 1
        if user_id in self.users:
            raise UserConflictError(f"User id '{user_id}' already exists")
        if any(u.username.lower() == username.lower() for u in self.users.values()):
            raise UserConflictError(f"Username '{username}' already exists")
        user = LocalUser(user_id=user_id, username=username)
        self.users[user_id] = copy.deepcopy(user)
        return user

    async def update_user(self, user: LocalUser) -> LocalUser:
        self.calls.append(("update_user", user.user_id))
        if user.user_id not in self.users:
            raise UserStoreError(f"User {user.user_id} not found")
        self.users[user.user_id] = copy.deepcopy(user)
        return user

    async def validate_password(self, user: LocalUser, password: str) -> bool:
        self.calls.append(("validate_password", user.user_id))
        return self.passwords.get(user.user_id) == password

    async def set_password(self, user: LocalUser, password: str) -> None:
        self.calls.append(("set_password", user.user_id))
        self.passwords[user.user_id] = password


@pytest.fixture
def user_store() -> InMemoryUserStore:
    """Empty in-memory local identity store"""
    return InMemoryUserStore()


@pytest.fixture
def alice_profile() -> RemoteIdentityProfile:
    """HumHub profile for alice"""
    return RemoteIdentityProfile(
        external_id="g-1",
        username="alice",
        email="a@x.com",
        first_name="Alice",
        last_name="Anderson",
        display_name="Alice Anderson",
        profile_url="https://humhub.example.org/u/alice",
        image_url="https://humhub.example.org/uploads/profile_image/g-1.jpg",
    )


@pytest.fixture
def bob() -> LocalUser:
    """Existing, enabled local user"""
    return LocalUser(
        user_id="local-bob",
        username="bob",
        email="bob@example.com",
        first_name="Bob",
        last_name="Builder",
        enabled=True,
        email_verified=False,
    )


@pytest.fixture
def mock_verifier() -> AsyncMock:
    """HumHub verifier that rejects everything unless told otherwise"""
    verifier = AsyncMock(spec=HumHubCredentialVerifier)
    verifier.verify.return_value = None
    return verifier


@pytest.fixture
def pipeline(user_store, mock_verifier) -> AuthenticationPipeline:
    """Decision pipeline over the in-memory store and mocked verifier"""
    return AuthenticationPipeline(store=user_store, verifier=mock_verifier)


@pytest_asyncio.fixture
async def client(pipeline) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with pipeline dependency override."""
    from humhub_bridge.api.routes.auth import get_authentication_pipeline
    from humhub_bridge.main import app

    app.dependency_overrides[get_authentication_pipeline] = lambda: pipeline

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def no_env_proxies(monkeypatch):
    """Keep httpx from routing test traffic through a proxy from the environment"""
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
