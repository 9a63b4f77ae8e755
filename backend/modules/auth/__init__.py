"""
Authentication module.

Owns the process-wide session state, validates credentials before any
provider call, and adapts Supabase Auth as the identity provider.

Public API:
- ISessionManager: Interface for session operations
- IIdentityProvider: Capability set consumed from the identity provider
- Session, SessionState: Session snapshot and states
- Credential validators: validate_email, validate_password, ...
- Auth exceptions: InvalidCredentialsError, NoActiveSessionError, etc.
"""

from .interfaces import IIdentityProvider, ISessionManager, Subscription
from .models import (
    FederatedProvider,
    IdentityEvent,
    IdentityEventType,
    NonceChallenge,
    Rule,
    RuleViolation,
    Session,
    SessionState,
)
from .validation import (
    validate_email,
    validate_password,
    validate_display_name,
    validate_registration,
)
from .exceptions import (
    CredentialValidationError,
    InvalidCredentialsError,
    EmailAlreadyInUseError,
    UnknownIdentityError,
    NetworkError,
    NoActiveSessionError,
    ProviderConfigurationError,
    UnknownAuthError,
    NonceGenerationError,
)

__all__ = [
    # Interfaces
    "IIdentityProvider",
    "ISessionManager",
    "Subscription",
    # Models
    "FederatedProvider",
    "IdentityEvent",
    "IdentityEventType",
    "NonceChallenge",
    "Rule",
    "RuleViolation",
    "Session",
    "SessionState",
    # Validation
    "validate_email",
    "validate_password",
    "validate_display_name",
    "validate_registration",
    # Exceptions
    "CredentialValidationError",
    "InvalidCredentialsError",
    "EmailAlreadyInUseError",
    "UnknownIdentityError",
    "NetworkError",
    "NoActiveSessionError",
    "ProviderConfigurationError",
    "UnknownAuthError",
    "NonceGenerationError",
]
