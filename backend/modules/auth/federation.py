"""
Helpers for Google and Apple ID token sign-in.

Covers nonce generation and the unverified inspection of ID token claims
used to pick the provider and check the nonce binding. Signature and
expiry verification stay with the identity provider.
"""

import hashlib
import secrets
from typing import Any, Optional

import jwt

from .exceptions import InvalidCredentialsError, NonceGenerationError
from .models import FederatedProvider, NonceChallenge

NONCE_LENGTH = 32
NONCE_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz-._"

ISSUERS: dict[str, FederatedProvider] = {
    "https://accounts.google.com": FederatedProvider.GOOGLE,
    "accounts.google.com": FederatedProvider.GOOGLE,
    "https://appleid.apple.com": FederatedProvider.APPLE,
}


def random_nonce(length: int = NONCE_LENGTH) -> str:
    """
    Generate a random nonce from the system's secure random source.

    Raises:
        NonceGenerationError: If the random source is unavailable
    """
    if length <= 0:
        raise ValueError("Nonce length must be positive")
    try:
        return "".join(secrets.choice(NONCE_CHARSET) for _ in range(length))
    except (OSError, NotImplementedError) as e:
        raise NonceGenerationError(f"Unable to generate nonce: {e}") from e


def hash_nonce(raw_nonce: str) -> str:
    """SHA-256 hex digest, the form Apple and Google embed in the ID token."""
    return hashlib.sha256(raw_nonce.encode("utf-8")).hexdigest()


def create_nonce_challenge(length: int = NONCE_LENGTH) -> NonceChallenge:
    raw = random_nonce(length)
    return NonceChallenge(raw_nonce=raw, hashed_nonce=hash_nonce(raw))


def read_token_claims(token: str) -> dict[str, Any]:
    """
    Decode ID token claims without verifying the signature.

    Raises:
        InvalidCredentialsError: If the token is empty or not a JWT
    """
    if not token:
        raise InvalidCredentialsError("Authentication token error.")
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        raise InvalidCredentialsError(f"Authentication token error: {e}") from e


def detect_provider(claims: dict[str, Any]) -> FederatedProvider:
    """
    Determine the issuing provider from the ``iss`` claim.

    Raises:
        InvalidCredentialsError: If the issuer is not Google or Apple
    """
    issuer = claims.get("iss")
    provider = ISSUERS.get(issuer) if isinstance(issuer, str) else None
    if provider is None:
        raise InvalidCredentialsError(f"Unsupported identity token issuer: {issuer}")
    return provider


def verify_nonce(claims: dict[str, Any], raw_nonce: Optional[str]) -> None:
    """
    Check that a token's nonce claim matches the raw nonce.

    Tokens without a nonce claim pass. A token with a nonce claim requires
    the raw nonce that produced it.

    Raises:
        InvalidCredentialsError: If the nonce is missing or doesn't match
    """
    expected = claims.get("nonce")
    if expected is None:
        return
    if raw_nonce is None:
        raise InvalidCredentialsError("Sign-in nonce missing for a nonce-bound token.")
    # Apple embeds the hash; some Google flows embed the raw value
    if expected not in (hash_nonce(raw_nonce), raw_nonce):
        raise InvalidCredentialsError("Sign-in nonce does not match the token.")
