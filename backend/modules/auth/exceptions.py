"""
Authentication module exceptions.

These exceptions are raised by the session manager and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from typing import Optional

from shared.exceptions import (
    DefyError,
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    NetworkError,
    ValidationError,
)

from .models import RuleViolation


class CredentialValidationError(ValidationError):
    """Raised when credential input fails one or more rules."""

    def __init__(self, violations: list[RuleViolation]):
        self.violations = list(violations)
        self.fields = sorted({v.field for v in self.violations})
        message = self.violations[0].message if self.violations else "Invalid input"
        super().__init__(
            message,
            code="VALIDATION_FAILED",
            details={
                "fields": self.fields,
                "violations": [v.model_dump(mode="json") for v in self.violations],
            },
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised when the provider rejects the credentials or token."""

    def __init__(self, message: str = "Invalid credentials provided."):
        super().__init__(message, code="INVALID_CREDENTIALS")


class EmailAlreadyInUseError(ConflictError):
    """Raised when registering an email that already has an account."""

    def __init__(self, message: str = "This email is already registered."):
        super().__init__(message, code="EMAIL_ALREADY_IN_USE")


class UnknownIdentityError(AuthenticationError):
    """Raised when the provider has no account for the given credentials."""

    def __init__(self, message: str = "User not found."):
        super().__init__(message, code="UNKNOWN_IDENTITY")


class NoActiveSessionError(AuthenticationError):
    """Raised when an operation needs a signed-in user and there is none."""

    def __init__(self, message: str = "No user is currently signed in."):
        super().__init__(message, code="NO_ACTIVE_SESSION")


class ProviderConfigurationError(ConfigurationError):
    """Raised when the identity provider is missing or misconfigured."""

    def __init__(
        self,
        message: str = "App configuration error. Please contact support.",
        details: Optional[dict] = None,
    ):
        super().__init__(message, code="PROVIDER_CONFIGURATION", details=details)


class UnknownAuthError(DefyError):
    """Wraps a provider or store failure that has no specific mapping."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(
            str(cause) or "Something went wrong. Please try again.",
            code="UNKNOWN_AUTH_ERROR",
            details={"cause": type(cause).__name__},
        )


class NonceGenerationError(RuntimeError):
    """
    The secure random source failed while generating a sign-in nonce.

    Not a DefyError: this is an environment fault and is never mapped
    into a recoverable result.
    """

    pass


__all__ = [
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
