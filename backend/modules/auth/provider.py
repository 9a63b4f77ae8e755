"""
Supabase Auth identity provider.

Adapts the Supabase (GoTrue) async auth client to IIdentityProvider and
maps Supabase auth errors to the auth module's exceptions.
"""

import logging
from typing import Any, Optional

import httpx
from supabase import AsyncClient
from supabase_auth.errors import (
    AuthApiError,
    AuthError,
    AuthInvalidCredentialsError,
    AuthRetryableError,
    AuthSessionMissingError,
    AuthWeakPasswordError,
)

from shared.exceptions import DefyError, NetworkError
from shared.models import Identity

from .exceptions import (
    CredentialValidationError,
    EmailAlreadyInUseError,
    InvalidCredentialsError,
    NoActiveSessionError,
    ProviderConfigurationError,
    UnknownAuthError,
    UnknownIdentityError,
)
from .interfaces import IIdentityProvider, IdentityListener, Subscription
from .models import FederatedProvider, IdentityEvent, IdentityEventType, Rule
from .validation import violation

logger = logging.getLogger(__name__)

_INVALID_CREDENTIAL_CODES = {"invalid_credentials", "bad_jwt", "bad_code_verifier"}
_EMAIL_IN_USE_CODES = {"email_exists", "user_already_exists", "identity_already_exists"}
_CONFIGURATION_CODES = {
    "provider_disabled",
    "email_provider_disabled",
    "signup_disabled",
    "oauth_provider_not_supported",
    "bad_oauth_callback",
    "validation_failed",
    "not_admin",
}
_NO_SESSION_CODES = {"session_not_found", "session_expired", "no_authorization", "refresh_token_not_found"}


def map_provider_error(error: Exception) -> DefyError:
    """Translate a Supabase auth or transport error into the auth taxonomy."""
    if isinstance(error, httpx.TransportError) or isinstance(error, AuthRetryableError):
        return NetworkError("supabase_auth")
    if isinstance(error, AuthSessionMissingError):
        return NoActiveSessionError()
    if isinstance(error, AuthInvalidCredentialsError):
        return InvalidCredentialsError()
    if isinstance(error, AuthWeakPasswordError):
        return CredentialValidationError([violation(Rule.PASSWORD_REJECTED, "password")])

    if isinstance(error, AuthApiError):
        code = str(error.code or "")
        message = (error.message or "").lower()
        if code in _INVALID_CREDENTIAL_CODES or "invalid login credentials" in message:
            return InvalidCredentialsError()
        if code in _EMAIL_IN_USE_CODES or "already registered" in message:
            return EmailAlreadyInUseError()
        if code == "user_not_found":
            return UnknownIdentityError()
        if code == "weak_password":
            return CredentialValidationError([violation(Rule.PASSWORD_REJECTED, "password")])
        if code in _NO_SESSION_CODES:
            return NoActiveSessionError()
        if code in _CONFIGURATION_CODES:
            return ProviderConfigurationError(details={"provider_code": code})

    return UnknownAuthError(error)


def identity_from_user(user: Any) -> Identity:
    """Build an Identity from a Supabase auth user."""
    user_metadata = getattr(user, "user_metadata", None) or {}
    app_metadata = getattr(user, "app_metadata", None) or {}
    return Identity(
        id=str(user.id),
        email=getattr(user, "email", None),
        display_name=(
            user_metadata.get("display_name")
            or user_metadata.get("full_name")
            or user_metadata.get("name")
        ),
        photo_url=user_metadata.get("avatar_url") or user_metadata.get("picture"),
        provider=app_metadata.get("provider", "email"),
    )


def _identity_from_session(session: Any) -> Optional[Identity]:
    if session is None or getattr(session, "user", None) is None:
        return None
    return identity_from_user(session.user)


def _require_user(response: Any, operation: str) -> Identity:
    user = getattr(response, "user", None)
    if user is None:
        raise UnknownAuthError(RuntimeError(f"Supabase returned no user for {operation}"))
    return identity_from_user(user)


class SupabaseIdentityProvider(IIdentityProvider):
    """
    Identity provider backed by Supabase Auth.

    Uses the anon-key client for the user session and, when given, the
    service-role client for account deletion.
    """

    def __init__(self, auth_client: AsyncClient, admin_client: Optional[AsyncClient] = None):
        self._client = auth_client
        self._admin = admin_client

    def on_identity_changed(self, callback: IdentityListener) -> Subscription:
        def forward(event: str, session: Any) -> None:
            try:
                event_type = IdentityEventType(str(event))
            except ValueError:
                logger.debug(f"Ignoring unrecognized auth event: {event}")
                return
            callback(IdentityEvent(type=event_type, identity=_identity_from_session(session)))

        return self._client.auth.on_auth_state_change(forward)

    async def current_identity(self) -> Optional[Identity]:
        try:
            session = await self._client.auth.get_session()
        except (AuthError, httpx.HTTPError) as e:
            raise map_provider_error(e) from e
        return _identity_from_session(session)

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        try:
            response = await self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except (AuthError, httpx.HTTPError) as e:
            raise map_provider_error(e) from e
        return _require_user(response, "password sign-in")

    async def create_account(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> Identity:
        credentials: dict[str, Any] = {"email": email, "password": password}
        if display_name:
            credentials["options"] = {"data": {"display_name": display_name}}
        try:
            response = await self._client.auth.sign_up(credentials)
        except (AuthError, httpx.HTTPError) as e:
            raise map_provider_error(e) from e
        return _require_user(response, "sign-up")

    async def sign_in_with_federated_token(
        self,
        provider: FederatedProvider,
        id_token: str,
        raw_nonce: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> Identity:
        credentials: dict[str, Any] = {"provider": provider.value, "token": id_token}
        if raw_nonce:
            credentials["nonce"] = raw_nonce
        if access_token:
            credentials["access_token"] = access_token
        try:
            response = await self._client.auth.sign_in_with_id_token(credentials)
        except (AuthError, httpx.HTTPError) as e:
            raise map_provider_error(e) from e
        return _require_user(response, f"{provider.value} sign-in")

    async def send_password_reset_email(
        self,
        email: str,
        redirect_to: Optional[str] = None,
    ) -> None:
        options = {"redirect_to": redirect_to} if redirect_to else {}
        try:
            await self._client.auth.reset_password_for_email(email, options)
        except (AuthError, httpx.HTTPError) as e:
            raise map_provider_error(e) from e

    async def update_profile(self, display_name: str) -> Identity:
        try:
            response = await self._client.auth.update_user({"data": {"display_name": display_name}})
        except (AuthError, httpx.HTTPError) as e:
            raise map_provider_error(e) from e
        return _require_user(response, "profile update")

    async def update_password(self, new_password: str) -> None:
        try:
            await self._client.auth.update_user({"password": new_password})
        except (AuthError, httpx.HTTPError) as e:
            raise map_provider_error(e) from e

    async def sign_out(self) -> None:
        try:
            await self._client.auth.sign_out()
        except (AuthError, httpx.HTTPError) as e:
            raise map_provider_error(e) from e

    async def delete_current_account(self, identity_id: str) -> None:
        if self._admin is None:
            raise ProviderConfigurationError(
                "Account deletion requires the Supabase service role key."
            )
        try:
            await self._admin.auth.admin.delete_user(identity_id)
            # The server already dropped the user; only the stored session remains
            await self._client.auth.sign_out({"scope": "local"})
        except (AuthError, httpx.HTTPError) as e:
            raise map_provider_error(e) from e
