"""Tests for nonce generation and ID token inspection."""

import hashlib

import pytest

from modules.auth.exceptions import InvalidCredentialsError, NonceGenerationError
from modules.auth.federation import (
    NONCE_CHARSET,
    NONCE_LENGTH,
    create_nonce_challenge,
    detect_provider,
    hash_nonce,
    random_nonce,
    read_token_claims,
    verify_nonce,
)
from modules.auth.models import FederatedProvider
from shared.exceptions import DefyError

from tests.conftest import APPLE_ISSUER, GOOGLE_ISSUER, create_id_token


class TestNonce:
    def test_default_length_and_charset(self):
        nonce = random_nonce()
        assert len(nonce) == NONCE_LENGTH
        assert set(nonce) <= set(NONCE_CHARSET)

    def test_nonces_differ(self):
        assert len({random_nonce() for _ in range(20)}) == 20

    def test_custom_length(self):
        assert len(random_nonce(8)) == 8

    def test_non_positive_length_rejected(self):
        with pytest.raises(ValueError):
            random_nonce(0)

    def test_hash_is_sha256_hex(self):
        assert hash_nonce("abc") == hashlib.sha256(b"abc").hexdigest()

    def test_challenge_pairs_raw_and_hash(self):
        challenge = create_nonce_challenge()
        assert challenge.hashed_nonce == hash_nonce(challenge.raw_nonce)

    def test_random_source_failure(self, monkeypatch):
        def broken_choice(seq):
            raise NotImplementedError("no secure source")

        monkeypatch.setattr("modules.auth.federation.secrets.choice", broken_choice)
        with pytest.raises(NonceGenerationError):
            random_nonce()

    def test_generation_error_is_not_recoverable_taxonomy(self):
        assert not issubclass(NonceGenerationError, DefyError)


class TestReadTokenClaims:
    def test_reads_claims_without_verifying(self):
        claims = read_token_claims(create_id_token(subject="g-1"))
        assert claims["sub"] == "g-1"
        assert claims["iss"] == GOOGLE_ISSUER

    def test_expired_token_still_readable(self):
        """Expiry is the identity provider's job."""
        claims = read_token_claims(create_id_token(expired=True))
        assert "exp" in claims

    def test_empty_token(self):
        with pytest.raises(InvalidCredentialsError):
            read_token_claims("")

    def test_garbage_token(self):
        with pytest.raises(InvalidCredentialsError):
            read_token_claims("not.a.jwt")


class TestDetectProvider:
    @pytest.mark.parametrize(
        "issuer,expected",
        [
            (GOOGLE_ISSUER, FederatedProvider.GOOGLE),
            ("accounts.google.com", FederatedProvider.GOOGLE),
            (APPLE_ISSUER, FederatedProvider.APPLE),
        ],
    )
    def test_known_issuers(self, issuer, expected):
        assert detect_provider({"iss": issuer}) == expected

    def test_unknown_issuer(self):
        with pytest.raises(InvalidCredentialsError):
            detect_provider({"iss": "https://evil.example.com"})

    def test_missing_issuer(self):
        with pytest.raises(InvalidCredentialsError):
            detect_provider({})


class TestVerifyNonce:
    def test_token_without_nonce_passes(self):
        verify_nonce({}, None)
        verify_nonce({}, "anything")

    def test_hashed_nonce_matches(self):
        verify_nonce({"nonce": hash_nonce("raw")}, "raw")

    def test_raw_nonce_matches(self):
        verify_nonce({"nonce": "raw"}, "raw")

    def test_mismatch(self):
        with pytest.raises(InvalidCredentialsError):
            verify_nonce({"nonce": hash_nonce("raw")}, "other")

    def test_missing_raw_nonce(self):
        with pytest.raises(InvalidCredentialsError):
            verify_nonce({"nonce": hash_nonce("raw")}, None)
