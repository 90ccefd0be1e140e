"""Session token helpers.

Two token formats, chosen by SESSION_TOKEN_SIGNING:
- Raw id (default): the token is the user's UUID, trusted at face value.
- Signed: an HS256 JWT whose sub claim is the user's UUID.

Pipeline:
- create_session_token: issuance after a successful code verification
- parse_bearer_header: Authorization header → token string
- resolve_session_token: token string → user id
"""

import uuid
from datetime import UTC, datetime, timedelta

import jwt

from cinesocial_auth.core.config import settings
from cinesocial_auth.core.errors import UnauthorizedError

_BEARER_SCHEME = "bearer"
_JWT_AUDIENCE = "cinesocial"


def create_jwt(
    *,
    user_id: str,
    secret: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT with standard claims.

    Args:
        user_id: User UUID string for the sub claim.
        secret: HMAC signing secret.
        expires_delta: Time until expiration. Defaults to the configured
            session token lifetime.

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(UTC)
    lifetime = expires_delta or timedelta(minutes=settings.session_token_ttl_minutes)
    payload = {
        "sub": user_id,
        "aud": _JWT_AUDIENCE,
        "iss": settings.auth_issuer,
        "exp": now + lifetime,
        "iat": now,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def create_session_token(user_id: uuid.UUID) -> str:
    """Issue the session token for a verified user."""
    if not settings.session_token_signing:
        return str(user_id)
    return create_jwt(
        user_id=str(user_id),
        secret=settings.auth_secret.get_secret_value(),
    )


def parse_bearer_header(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Args:
        authorization: Raw header value, or None when absent.

    Returns:
        The token string.

    Raises:
        UnauthorizedError: If the header is absent, not Bearer, or empty.
    """
    if not authorization:
        raise UnauthorizedError()
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != _BEARER_SCHEME or not token:
        raise UnauthorizedError()
    return token


def resolve_session_token(token: str) -> uuid.UUID:
    """Map a session token to the user id it represents.

    Security: No signature check in raw-id mode. Failures never say why.

    Args:
        token: Bearer token from the request.

    Returns:
        UUID of the token's user.

    Raises:
        UnauthorizedError: If the token is malformed, forged or expired.
    """
    if not settings.session_token_signing:
        try:
            return uuid.UUID(token)
        except ValueError as exc:
            raise UnauthorizedError() from exc

    try:
        payload = jwt.decode(
            token,
            settings.auth_secret.get_secret_value(),
            algorithms=["HS256"],
            audience=_JWT_AUDIENCE,
            issuer=settings.auth_issuer,
        )
        return uuid.UUID(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError) as exc:
        raise UnauthorizedError() from exc
