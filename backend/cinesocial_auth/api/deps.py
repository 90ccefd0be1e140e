"""Shared dependencies for API endpoints.

Database session, bearer-token authentication, and service construction.

The session factory and avatar storage live on app.state. Auth runs before
the endpoint body, so no store call happens without a token.
"""

import uuid
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cinesocial_auth.core.auth import parse_bearer_header, resolve_session_token
from cinesocial_auth.core.database import get_db
from cinesocial_auth.core.storage import AvatarStorage
from cinesocial_auth.services.verification_session import VerificationSessionService


def get_current_user_id(
    authorization: Annotated[str | None, Header()] = None,
) -> uuid.UUID:
    """Get current user ID from the Authorization header.

    Validation steps:
    1. Require ``Authorization: Bearer <token>``
    2. Resolve the token (raw UUID, or verified JWT when signing is on)

    Args:
        authorization: Raw Authorization header (injected by FastAPI).

    Returns:
        UUID of the current authenticated user.

    Raises:
        UnauthorizedError: 401 for any auth failure.
    """
    token = parse_bearer_header(authorization)
    return resolve_session_token(token)


def get_avatar_storage(request: Request) -> AvatarStorage:
    """Avatar storage created at startup."""
    return request.app.state.avatar_storage


DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUserId = Annotated[uuid.UUID, Depends(get_current_user_id)]
AvatarStorageDep = Annotated[AvatarStorage, Depends(get_avatar_storage)]


def get_verification_service(
    db: DbSession,
    avatar_storage: AvatarStorageDep,
) -> VerificationSessionService:
    """Build the verification service for one request."""
    return VerificationSessionService(db, avatar_storage=avatar_storage)


VerificationService = Annotated[
    VerificationSessionService, Depends(get_verification_service)
]
