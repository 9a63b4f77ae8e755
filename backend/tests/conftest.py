"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules:
a scriptable fake identity provider, an in-memory document store, and a
helper that builds Google/Apple style ID tokens.
"""

import pytest
from datetime import datetime, timezone, timedelta
from typing import Optional
import jwt  # PyJWT

from api.dependencies import reset_container
from modules.auth.exceptions import (
    EmailAlreadyInUseError,
    InvalidCredentialsError,
    UnknownIdentityError,
)
from modules.auth.interfaces import IIdentityProvider, IdentityListener
from modules.auth.models import FederatedProvider, IdentityEvent, IdentityEventType
from modules.profiles.repository import ProfileRepository, ReadingProgressRepository
from modules.profiles.service import ProfileService
from shared.config import Settings, get_settings
from shared.documents import InMemoryDocumentStore
from shared.models import Identity


# Signing key for fake ID tokens; signatures are never verified locally
TEST_TOKEN_SECRET = "test-secret-key-for-testing-only"

GOOGLE_ISSUER = "https://accounts.google.com"
APPLE_ISSUER = "https://appleid.apple.com"


def create_id_token(
    subject: str = "federated-user-1",
    email: str = "fed@example.com",
    issuer: str = GOOGLE_ISSUER,
    nonce: Optional[str] = None,
    expired: bool = False,
) -> str:
    """
    Create an ID token shaped like the ones Google and Apple issue.

    Args:
        subject: The provider's user id
        email: Email claim
        issuer: iss claim, which selects the provider
        nonce: Optional nonce claim (usually the hashed nonce)
        expired: If True, the exp claim is in the past

    Returns:
        JWT string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "iss": issuer,
        "sub": subject,
        "email": email,
        "aud": "defy-test-client",
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
    }
    if nonce is not None:
        payload["nonce"] = nonce
    return jwt.encode(payload, TEST_TOKEN_SECRET, algorithm="HS256")


class FakeSubscription:
    def __init__(self, provider: "FakeIdentityProvider", callback: IdentityListener):
        self._provider = provider
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        self.active = False
        if self in self._provider.subscriptions:
            self._provider.subscriptions.remove(self)


class FakeIdentityProvider(IIdentityProvider):
    """
    In-process identity provider.

    Keeps a table of accounts and a "stored session" like the real client.
    Tests can queue failures per method with ``fail_next`` and push
    notifications with ``emit``.
    """

    def __init__(self, emit_on_change: bool = False):
        self.accounts: dict[str, tuple[str, Identity]] = {}
        self.current: Optional[Identity] = None
        self.subscriptions: list[FakeSubscription] = []
        self.calls: list[str] = []
        self.federated_nonces: list[Optional[str]] = []
        self.failures: dict[str, Exception] = {}
        self.emit_on_change = emit_on_change
        self.confirm_email_on_sign_up = False

    # Test controls

    def add_account(self, email: str, password: str, **fields) -> Identity:
        identity = Identity(id=fields.pop("id", f"user-{len(self.accounts) + 1}"), email=email, **fields)
        self.accounts[email] = (password, identity)
        return identity

    def fail_next(self, method: str, error: Exception) -> None:
        self.failures[method] = error

    def emit(self, event_type: IdentityEventType, identity: Optional[Identity] = None) -> None:
        event = IdentityEvent(type=event_type, identity=identity)
        for subscription in list(self.subscriptions):
            subscription.callback(event)

    def _enter(self, method: str) -> None:
        self.calls.append(method)
        error = self.failures.pop(method, None)
        if error is not None:
            raise error

    def _set_current(self, identity: Optional[Identity], event_type: IdentityEventType) -> None:
        self.current = identity
        if self.emit_on_change:
            self.emit(event_type, identity)

    # IIdentityProvider

    def on_identity_changed(self, callback: IdentityListener) -> FakeSubscription:
        subscription = FakeSubscription(self, callback)
        self.subscriptions.append(subscription)
        return subscription

    async def current_identity(self) -> Optional[Identity]:
        self._enter("current_identity")
        return self.current

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        self._enter("sign_in_with_password")
        if email not in self.accounts:
            raise UnknownIdentityError()
        stored_password, identity = self.accounts[email]
        if stored_password != password:
            raise InvalidCredentialsError()
        self._set_current(identity, IdentityEventType.SIGNED_IN)
        return identity

    async def create_account(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> Identity:
        self._enter("create_account")
        if email in self.accounts:
            raise EmailAlreadyInUseError()
        identity = self.add_account(email, password, display_name=display_name)
        if not self.confirm_email_on_sign_up:
            self._set_current(identity, IdentityEventType.SIGNED_IN)
        return identity

    async def sign_in_with_federated_token(
        self,
        provider: FederatedProvider,
        id_token: str,
        raw_nonce: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> Identity:
        self._enter("sign_in_with_federated_token")
        self.federated_nonces.append(raw_nonce)
        claims = jwt.decode(id_token, options={"verify_signature": False})
        identity = Identity(id=claims["sub"], email=claims.get("email"), provider=provider.value)
        self._set_current(identity, IdentityEventType.SIGNED_IN)
        return identity

    async def send_password_reset_email(self, email: str, redirect_to: Optional[str] = None) -> None:
        self._enter("send_password_reset_email")

    async def update_profile(self, display_name: str) -> Identity:
        self._enter("update_profile")
        identity = self.current.model_copy(update={"display_name": display_name})
        self._set_current(identity, IdentityEventType.USER_UPDATED)
        return identity

    async def update_password(self, new_password: str) -> None:
        self._enter("update_password")

    async def sign_out(self) -> None:
        self._enter("sign_out")
        self._set_current(None, IdentityEventType.SIGNED_OUT)

    async def delete_current_account(self, identity_id: str) -> None:
        self._enter("delete_current_account")
        self.accounts = {
            email: entry for email, entry in self.accounts.items() if entry[1].id != identity_id
        }
        self._set_current(None, IdentityEventType.SIGNED_OUT)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached settings and the service container around each test."""
    get_settings.cache_clear()
    reset_container()
    yield
    reset_container()
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        document_store_backend="memory",
        password_reset_redirect_url="https://defy.example.com/reset",
        max_followed_topics=3,
        max_bookmarks=5,
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def profile_service(store, settings) -> ProfileService:
    return ProfileService(
        ProfileRepository(store),
        ReadingProgressRepository(store),
        settings=settings,
    )


@pytest.fixture
def test_identity() -> Identity:
    """Provide a consistent signed-in identity."""
    return Identity(id="test-user-123", email="test@example.com", display_name="Test User")
