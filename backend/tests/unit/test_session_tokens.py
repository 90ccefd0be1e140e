"""Tests for session token helpers.

Raw-id tokens (default) and signed JWT tokens, plus bearer header parsing.
"""

import uuid
from datetime import timedelta

import jwt
import pytest
from pydantic import SecretStr

from cinesocial_auth.core.auth import (
    create_jwt,
    create_session_token,
    parse_bearer_header,
    resolve_session_token,
)
from cinesocial_auth.core.config import settings
from cinesocial_auth.core.errors import UnauthorizedError

# Test-only secret for JWT tests
_TEST_SECRET = "test-secret-key-that-is-at-least-32-characters-long"  # nosec B105
_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")


@pytest.fixture
def signed_tokens(monkeypatch: pytest.MonkeyPatch) -> None:
    """Switch the process settings to signed session tokens."""
    monkeypatch.setattr(settings, "session_token_signing", True)
    monkeypatch.setattr(settings, "auth_secret", SecretStr(_TEST_SECRET))


class TestRawIdTokens:
    """Default mode: the token is the user id."""

    def test_token_is_user_id(self):
        """Issued token is the canonical UUID string."""
        assert create_session_token(_USER_ID) == str(_USER_ID)

    def test_resolves_back_to_user_id(self):
        """Token resolves to the same UUID."""
        assert resolve_session_token(str(_USER_ID)) == _USER_ID

    @pytest.mark.parametrize("token", ["not-a-uuid", "1234", "../etc/passwd"])
    def test_malformed_token_rejected(self, token: str):
        """Non-UUID tokens raise UnauthorizedError."""
        with pytest.raises(UnauthorizedError):
            resolve_session_token(token)


class TestSignedTokens:
    """SESSION_TOKEN_SIGNING=true: the token is an HS256 JWT."""

    @pytest.mark.usefixtures("signed_tokens")
    def test_token_is_jwt_with_user_sub(self):
        """Issued token decodes to the user id with the configured claims."""
        token = create_session_token(_USER_ID)

        payload = jwt.decode(
            token,
            _TEST_SECRET,
            algorithms=["HS256"],
            audience="cinesocial",
            issuer=settings.auth_issuer,
        )
        assert payload["sub"] == str(_USER_ID)
        for claim in ("aud", "iss", "exp", "iat"):
            assert claim in payload, f"Missing claim: {claim}"

    @pytest.mark.usefixtures("signed_tokens")
    def test_round_trip(self):
        """A freshly issued token resolves to its user."""
        assert resolve_session_token(create_session_token(_USER_ID)) == _USER_ID

    @pytest.mark.usefixtures("signed_tokens")
    def test_raw_id_rejected(self):
        """Raw ids are not accepted once signing is on."""
        with pytest.raises(UnauthorizedError):
            resolve_session_token(str(_USER_ID))

    @pytest.mark.usefixtures("signed_tokens")
    def test_expired_token_rejected(self):
        """Expired JWTs raise UnauthorizedError."""
        token = create_jwt(
            user_id=str(_USER_ID),
            secret=_TEST_SECRET,
            expires_delta=timedelta(seconds=-1),
        )

        with pytest.raises(UnauthorizedError):
            resolve_session_token(token)

    @pytest.mark.usefixtures("signed_tokens")
    def test_wrong_secret_rejected(self):
        """JWTs signed with another secret raise UnauthorizedError."""
        token = create_jwt(user_id=str(_USER_ID), secret="x" * 40)

        with pytest.raises(UnauthorizedError):
            resolve_session_token(token)

    @pytest.mark.usefixtures("signed_tokens")
    def test_non_uuid_subject_rejected(self):
        """A valid signature over a non-UUID sub is still rejected."""
        token = create_jwt(user_id="admin", secret=_TEST_SECRET)

        with pytest.raises(UnauthorizedError):
            resolve_session_token(token)


class TestParseBearerHeader:
    """Tests for parse_bearer_header()."""

    @pytest.mark.parametrize("header", ["Bearer abc", "bearer abc", "BEARER  abc "])
    def test_extracts_token(self, header: str):
        """Scheme is case-insensitive and surrounding spaces are dropped."""
        assert parse_bearer_header(header) == "abc"

    @pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer ", "Basic abc"])
    def test_rejects_missing_or_other_schemes(self, header: str | None):
        """Absent, empty or non-bearer headers raise UnauthorizedError."""
        with pytest.raises(UnauthorizedError):
            parse_bearer_header(header)
