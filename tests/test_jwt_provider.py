"""Unit tests for the token codec."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from session_api.config.settings import Settings
from session_api.core.exceptions import (
    ConfigurationError,
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from session_api.entities.token_claims import AccessClaims, RefreshClaims
from session_api.infrastructure.security.jwt_provider import JwtProvider

from conftest import TEST_SECRET


def _settings(**overrides) -> Settings:
    values = {"jwt_secret": TEST_SECRET, "jwt_access_minutes": 15, "jwt_refresh_minutes": 60}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def provider():
    return JwtProvider(_settings())


class TestConfiguration:
    def test_missing_secret_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            JwtProvider(_settings(jwt_secret=""))

    def test_replicas_with_the_same_secret_accept_each_others_tokens(self):
        token = JwtProvider(_settings()).issue_access_token(7)
        claims = JwtProvider(_settings()).decode(token)
        assert claims.subject_user_id == 7


class TestAccessTokens:
    def test_round_trip_yields_subject(self, provider):
        claims = provider.decode(provider.issue_access_token(42))

        assert isinstance(claims, AccessClaims)
        assert claims.subject_user_id == 42
        assert claims.kind == "access"
        assert claims.expires_at - claims.issued_at == timedelta(minutes=15)

    def test_two_access_tokens_differ(self, provider):
        assert provider.issue_access_token(1) != provider.issue_access_token(1)

    def test_expired_access_token_is_rejected(self):
        past = datetime.now(tz=timezone.utc) - timedelta(hours=1)
        stale = JwtProvider(_settings(), clock=lambda: past).issue_access_token(42)

        with pytest.raises(TokenExpiredError):
            JwtProvider(_settings()).decode(stale)

    def test_decode_access_rejects_refresh_token(self, provider):
        with pytest.raises(MalformedTokenError):
            provider.decode_access(provider.issue_refresh_token(1, "abc"))


class TestRefreshEnvelopes:
    def test_round_trip_carries_token_id(self, provider):
        claims = provider.decode(provider.issue_refresh_token(9, "token-123"))

        assert isinstance(claims, RefreshClaims)
        assert claims.subject_user_id == 9
        assert claims.token_id == "token-123"
        assert claims.expires_at - claims.issued_at == timedelta(minutes=60)

    def test_refresh_expiry_matches_claim(self, provider):
        token = provider.issue_refresh_token(9, "token-123")
        assert provider.refresh_expiry(token) == provider.decode_refresh(token).expires_at

    def test_decode_refresh_rejects_access_token(self, provider):
        with pytest.raises(MalformedTokenError):
            provider.decode_refresh(provider.issue_access_token(1))


class TestRejection:
    def test_foreign_secret_is_invalid_signature(self, provider):
        other = JwtProvider(_settings(jwt_secret="another-secret-of-sufficient-length-0000"))
        with pytest.raises(InvalidSignatureError):
            provider.decode(other.issue_access_token(1))

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_garbage_is_malformed(self, provider, token):
        with pytest.raises(MalformedTokenError):
            provider.decode(token)

    def test_unknown_kind_is_malformed(self, provider):
        now = int(datetime.now(tz=timezone.utc).timestamp())
        token = jwt.encode(
            {
                "iss": "session-api",
                "aud": "session-api-clients",
                "sub": "1",
                "iat": now,
                "exp": now + 60,
                "jti": "x",
                "typ": "password-reset",
            },
            TEST_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(MalformedTokenError):
            provider.decode(token)

    def test_non_numeric_subject_is_malformed(self, provider):
        now = int(datetime.now(tz=timezone.utc).timestamp())
        token = jwt.encode(
            {
                "iss": "session-api",
                "aud": "session-api-clients",
                "sub": "alice",
                "iat": now,
                "exp": now + 60,
                "jti": "x",
                "typ": "access",
            },
            TEST_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(MalformedTokenError):
            provider.decode(token)

    def test_wrong_audience_is_malformed(self):
        token = JwtProvider(_settings(jwt_audience="someone-else")).issue_access_token(1)
        with pytest.raises(MalformedTokenError):
            JwtProvider(_settings()).decode(token)
