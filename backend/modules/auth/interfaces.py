"""
Authentication module interfaces.

The session manager depends on IIdentityProvider, not on Supabase directly,
and other modules depend on ISessionManager, not on the concrete class.
This enables testing with fakes and swapping the identity vendor.
"""

from typing import Callable, Optional, Protocol, runtime_checkable

from shared.models import Identity

from .models import FederatedProvider, IdentityEvent, NonceChallenge, Session

IdentityListener = Callable[[IdentityEvent], None]
SessionListener = Callable[[Session], None]


@runtime_checkable
class Subscription(Protocol):
    """Handle for a provider notification subscription."""

    def unsubscribe(self) -> None:
        ...


@runtime_checkable
class IIdentityProvider(Protocol):
    """
    Capability set consumed from the external identity provider.

    Implementations raise the auth module's typed exceptions, never
    vendor-specific errors.
    """

    def on_identity_changed(self, callback: IdentityListener) -> Subscription:
        """
        Subscribe to identity-change notifications.

        The callback may run from any context and keeps running until the
        returned subscription is unsubscribed.
        """
        ...

    async def current_identity(self) -> Optional[Identity]:
        """Return the identity of the stored session, if any."""
        ...

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        ...

    async def create_account(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> Identity:
        ...

    async def sign_in_with_federated_token(
        self,
        provider: FederatedProvider,
        id_token: str,
        raw_nonce: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> Identity:
        ...

    async def send_password_reset_email(
        self,
        email: str,
        redirect_to: Optional[str] = None,
    ) -> None:
        ...

    async def update_profile(self, display_name: str) -> Identity:
        """Set the display name of the signed-in identity."""
        ...

    async def update_password(self, new_password: str) -> None:
        ...

    async def sign_out(self) -> None:
        """Revoke the local provider session."""
        ...

    async def delete_current_account(self, identity_id: str) -> None:
        """Delete the signed-in identity and drop its local session."""
        ...


@runtime_checkable
class ISessionManager(Protocol):
    """
    Interface for session operations.

    This protocol defines the contract that the auth module exposes
    to the presentation layer.
    """

    @property
    def session(self) -> Session:
        """Current immutable session snapshot."""
        ...

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Observe session snapshots; returns an unsubscribe callable."""
        ...

    async def start(self) -> Session:
        ...

    async def close(self) -> None:
        ...

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        ...

    async def register_with_password(
        self,
        email: str,
        password: str,
        confirm_password: str,
        display_name: str,
    ) -> Identity:
        ...

    def begin_federated_sign_in(self) -> NonceChallenge:
        ...

    async def sign_in_with_federated_token(
        self,
        provider_token: str,
        provider: Optional[FederatedProvider] = None,
        raw_nonce: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> Identity:
        ...

    async def request_password_reset(self, email: str) -> None:
        ...

    async def update_password(self, new_password: str) -> None:
        ...

    async def update_display_name(self, display_name: str) -> Identity:
        ...

    async def sign_out(self) -> None:
        ...

    async def delete_account(self) -> None:
        ...
