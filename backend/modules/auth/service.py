"""
Session manager implementation.

Owns the process-wide sign-in state. The state starts as ``loading`` and
is resolved by the provider's first notification or the initial session
check; afterwards it moves only between ``authenticated`` and
``unauthenticated``, always through ``_transition``.
"""

import logging
import threading
from typing import Awaitable, Callable, Optional, TypeVar

from shared.config import Settings, get_settings
from shared.exceptions import DefyError
from shared.models import Identity
from modules.profiles.interfaces import IProfileService

from .exceptions import (
    CredentialValidationError,
    NoActiveSessionError,
    UnknownAuthError,
)
from .federation import create_nonce_challenge, detect_provider, read_token_claims, verify_nonce
from .interfaces import IIdentityProvider, ISessionManager, SessionListener, Subscription
from .models import (
    FederatedProvider,
    IdentityEvent,
    IdentityEventType,
    NonceChallenge,
    Session,
    SessionState,
)
from .validation import check_display_name, check_email, check_password, validate_registration, validate_sign_in

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SIGNED_OUT_EVENTS = {IdentityEventType.SIGNED_OUT, IdentityEventType.USER_DELETED}


def _as_defy_error(error: Exception) -> DefyError:
    if isinstance(error, DefyError):
        return error
    return UnknownAuthError(error)


class SessionManager(ISessionManager):
    """
    Implementation of the session manager.

    Provider notifications may arrive from any thread and at any point of an
    operation, so every state change takes ``_lock``. After ``sign_out`` the
    revoked identity id is remembered and notifications that still carry it
    are ignored until the next explicit sign-in call.
    """

    def __init__(
        self,
        provider: IIdentityProvider,
        profiles: IProfileService,
        settings: Optional[Settings] = None,
    ):
        self._provider = provider
        self._profiles = profiles
        self._settings = settings or get_settings()

        self._lock = threading.Lock()
        self._session = Session(state=SessionState.LOADING)
        self._revoked_identity_id: Optional[str] = None
        self._pending_nonce: Optional[str] = None
        self._subscription: Optional[Subscription] = None
        self._listeners: list[SessionListener] = []

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def identity(self) -> Optional[Identity]:
        return self._session.identity

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _transition(
        self,
        identity: Optional[Identity],
        reason: str,
        *,
        from_provider: bool = False,
        initial: bool = False,
        revoke: bool = False,
    ) -> None:
        """
        Single entry point for state changes.

        Args:
            identity: New identity, or None for signed out
            reason: Short label for logs
            from_provider: Skip notifications carrying a revoked identity
            initial: Apply only while the state is still loading
            revoke: Remember the current identity as revoked
        """
        with self._lock:
            previous = self._session
            if initial and previous.state != SessionState.LOADING:
                return
            if (
                from_provider
                and identity is not None
                and identity.id == self._revoked_identity_id
            ):
                logger.debug(f"Ignoring {reason} for revoked identity {identity.id}")
                return
            if revoke and previous.identity is not None:
                self._revoked_identity_id = previous.identity.id

            if identity is None:
                current = Session(state=SessionState.UNAUTHENTICATED)
            else:
                current = Session(state=SessionState.AUTHENTICATED, identity=identity)
            if current == previous:
                return
            self._session = current
            listeners = list(self._listeners)

        logger.info(f"Session {previous.state.value} -> {current.state.value} ({reason})")
        for listener in listeners:
            listener(current)

    def _clear_revocation(self) -> None:
        with self._lock:
            self._revoked_identity_id = None

    def _require_identity(self) -> Identity:
        session = self._session
        if session.identity is None:
            raise NoActiveSessionError()
        return session.identity

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> Session:
        """
        Subscribe to provider notifications and resolve the loading state.

        If the initial session check fails the state resolves to
        unauthenticated and the mapped error is raised.
        """
        if self._subscription is None:
            self._subscription = self._provider.on_identity_changed(self._handle_identity_event)

        if self._session.state == SessionState.LOADING:
            try:
                identity = await self._provider.current_identity()
            except Exception as e:
                self._transition(None, "initial session check failed", initial=True)
                raise _as_defy_error(e) from e
            self._transition(identity, "initial session check", initial=True)

        return self._session

    async def close(self) -> None:
        """Unsubscribe from provider notifications. Safe to call twice."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def __aenter__(self) -> "SessionManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _handle_identity_event(self, event: IdentityEvent) -> None:
        identity = None if event.type in _SIGNED_OUT_EVENTS else event.identity
        self._transition(identity, event.type.value, from_provider=True)

    # -------------------------------------------------------------------------
    # Provider calls
    # -------------------------------------------------------------------------

    async def _call(self, operation: str, call: Awaitable[T]) -> T:
        """Await a provider or store call, mapping unexpected errors."""
        try:
            return await call
        except DefyError:
            raise
        except Exception as e:
            logger.error(f"Unexpected failure during {operation}: {e}", exc_info=True)
            raise UnknownAuthError(e) from e

    async def _revoke_provider_session(self) -> None:
        """Revoke the provider session; failures are logged, never raised."""
        try:
            await self._provider.sign_out()
        except Exception as e:
            logger.warning(f"Provider sign-out failed; local session cleared anyway: {e}")

    async def _complete_sign_in(self, identity: Identity, reason: str) -> None:
        """
        Bootstrap the profile and sync state with the provider.

        If the bootstrap fails the local session is cleared and the
        provider session revoked. The provider may already have notified
        a sign-in, and the revoke itself may fail.
        """
        try:
            await self._profiles.ensure_profile(identity)
        except Exception as e:
            logger.warning(f"Profile bootstrap failed for {identity.id}; revoking sign-in")
            self._transition(None, "profile bootstrap failed", revoke=True)
            await self._revoke_provider_session()
            raise _as_defy_error(e) from e

        # The provider decides whether a session exists (e.g. sign-up
        # pending email confirmation leaves none)
        current = await self._call("session check", self._provider.current_identity())
        self._transition(current, reason)

    # -------------------------------------------------------------------------
    # Sign-in
    # -------------------------------------------------------------------------

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        email = (email or "").strip()
        violations = validate_sign_in(email, password)
        if violations:
            raise CredentialValidationError(violations)

        self._clear_revocation()
        identity = await self._call(
            "password sign-in",
            self._provider.sign_in_with_password(email, password),
        )
        await self._complete_sign_in(identity, "password sign-in")
        return identity

    async def register_with_password(
        self,
        email: str,
        password: str,
        confirm_password: str,
        display_name: str,
    ) -> Identity:
        email = (email or "").strip()
        violations = validate_registration(email, password, confirm_password, display_name)
        if violations:
            raise CredentialValidationError(violations)
        display_name = display_name.strip()

        self._clear_revocation()
        identity = await self._call(
            "registration",
            self._provider.create_account(email, password, display_name),
        )
        if identity.display_name != display_name:
            identity = await self._call(
                "display name update",
                self._provider.update_profile(display_name),
            )

        await self._complete_sign_in(identity, "registration")
        logger.info(f"Registered user {identity.id}")
        return identity

    def begin_federated_sign_in(self) -> NonceChallenge:
        """
        Start a Google/Apple sign-in by issuing a nonce.

        The hashed nonce is for the external sign-in request; the raw nonce
        is kept for the token exchange.

        Raises:
            NonceGenerationError: If the secure random source fails
        """
        challenge = create_nonce_challenge()
        with self._lock:
            self._pending_nonce = challenge.raw_nonce
        return challenge

    async def sign_in_with_federated_token(
        self,
        provider_token: str,
        provider: Optional[FederatedProvider] = None,
        raw_nonce: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> Identity:
        claims = read_token_claims(provider_token)
        resolved = provider or detect_provider(claims)

        # A token without a nonce claim is exchanged without a nonce
        nonce: Optional[str] = None
        if claims.get("nonce") is not None:
            with self._lock:
                pending = self._pending_nonce
            nonce = raw_nonce or pending
            verify_nonce(claims, nonce)

        self._clear_revocation()
        identity = await self._call(
            f"{resolved.value} sign-in",
            self._provider.sign_in_with_federated_token(
                resolved,
                provider_token,
                raw_nonce=nonce,
                access_token=access_token,
            ),
        )
        if nonce is not None:
            with self._lock:
                if self._pending_nonce == nonce:
                    self._pending_nonce = None
        await self._complete_sign_in(identity, f"{resolved.value} sign-in")
        return identity

    # -------------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------------

    async def request_password_reset(self, email: str) -> None:
        email = (email or "").strip()
        violations = check_email(email)
        if violations:
            raise CredentialValidationError(violations)

        await self._call(
            "password reset",
            self._provider.send_password_reset_email(
                email,
                redirect_to=self._settings.password_reset_redirect_url,
            ),
        )
        logger.info("Password reset email requested")

    async def update_password(self, new_password: str) -> None:
        self._require_identity()
        violations = check_password(new_password, field="new_password")
        if violations:
            raise CredentialValidationError(violations)
        await self._call("password update", self._provider.update_password(new_password))

    async def update_display_name(self, display_name: str) -> Identity:
        current = self._require_identity()
        violations = check_display_name(display_name)
        if violations:
            raise CredentialValidationError(violations)
        display_name = display_name.strip()

        identity = await self._call(
            "display name update",
            self._provider.update_profile(display_name),
        )
        await self._call(
            "profile update",
            self._profiles.update_display_name(current.id, display_name),
        )
        self._transition(identity, "display name updated")
        return identity

    async def sign_out(self) -> None:
        """
        Clear the local session and revoke the provider session.

        Local state clears even when the provider revoke fails.
        """
        self._transition(None, "sign-out", revoke=True)
        await self._revoke_provider_session()

    async def delete_account(self) -> None:
        """
        Delete the signed-in identity and its profile.

        Raises:
            NoActiveSessionError: If no user is signed in
        """
        identity = self._require_identity()
        await self._call(
            "account deletion",
            self._provider.delete_current_account(identity.id),
        )
        self._transition(None, "account deleted", revoke=True)

        try:
            await self._profiles.delete_profile(identity.id)
        except DefyError as e:
            # The identity is already gone; the orphaned profile is unreachable
            logger.error(f"Account {identity.id} deleted but profile cleanup failed: {e}")
