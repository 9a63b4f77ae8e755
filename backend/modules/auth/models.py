"""
Authentication module data models.

These models define the session state exposed to other modules and the
request/response shapes of the session endpoints.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from shared.models import Identity


class SessionState(str, Enum):
    """Sign-in state of the process-wide session."""

    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class Session(BaseModel):
    """
    Immutable snapshot of the session.

    The identity is present if and only if the state is authenticated;
    constructing a snapshot that breaks this raises a validation error.
    """

    state: SessionState = Field(..., description="Current sign-in state")
    identity: Optional[Identity] = Field(None, description="Signed-in principal")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _identity_matches_state(self) -> "Session":
        authenticated = self.state == SessionState.AUTHENTICATED
        if authenticated and self.identity is None:
            raise ValueError("authenticated session requires an identity")
        if not authenticated and self.identity is not None:
            raise ValueError(f"{self.state.value} session cannot carry an identity")
        return self

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED


class IdentityEventType(str, Enum):
    """Kinds of identity-change notification emitted by the provider."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    USER_DELETED = "USER_DELETED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    MFA_CHALLENGE_VERIFIED = "MFA_CHALLENGE_VERIFIED"


class IdentityEvent(BaseModel):
    """A single identity-change notification."""

    type: IdentityEventType
    identity: Optional[Identity] = None

    model_config = {"frozen": True}


class FederatedProvider(str, Enum):
    """External identity providers accepted for token exchange."""

    GOOGLE = "google"
    APPLE = "apple"


class NonceChallenge(BaseModel):
    """
    Nonce pair for binding an ID token to a sign-in attempt.

    The hashed nonce goes to the external provider; the raw nonce is kept
    and sent with the token exchange.
    """

    raw_nonce: str
    hashed_nonce: str

    model_config = {"frozen": True}


class Rule(str, Enum):
    """Credential rules checked before any provider call."""

    INVALID_EMAIL = "invalid_email"
    PASSWORD_TOO_SHORT = "password_too_short"
    PASSWORD_TOO_LONG = "password_too_long"
    PASSWORD_MISMATCH = "password_mismatch"
    PASSWORD_REJECTED = "password_rejected"
    DISPLAY_NAME_EMPTY = "display_name_empty"
    DISPLAY_NAME_TOO_LONG = "display_name_too_long"


class RuleViolation(BaseModel):
    """One failed credential rule."""

    rule: Rule
    field: str
    message: str

    model_config = {"frozen": True}


# -----------------------------------------------------------------------------
# API request/response models
# -----------------------------------------------------------------------------


class SignInRequest(BaseModel):
    """Email/password sign-in."""

    email: str
    password: str


class RegisterRequest(BaseModel):
    """Email/password registration."""

    email: str
    password: str
    confirm_password: str
    display_name: str


class FederatedSignInRequest(BaseModel):
    """Google/Apple ID token exchange."""

    provider_token: str = Field(..., description="ID token issued by Google or Apple")
    provider: Optional[FederatedProvider] = Field(
        None, description="Provider; read from the token issuer when omitted"
    )
    access_token: Optional[str] = Field(None, description="Google access token, if any")


class PasswordResetRequest(BaseModel):
    email: str


class UpdatePasswordRequest(BaseModel):
    new_password: str


class UpdateDisplayNameRequest(BaseModel):
    display_name: str


class NonceResponse(BaseModel):
    """Hashed nonce to pass to the external sign-in request."""

    nonce: str
