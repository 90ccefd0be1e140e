"""Verification session service: code lifecycle and session issuance.

Three steps make up passwordless sign-in:
1. request_code: upsert the user by email with a fresh 6-digit code
2. verify_code: atomically consume a live code and issue a session token
3. setup_profile: set display name and/or avatar for the token's user

The same request_code call serves signup and login: the upsert creates the
row on first use and overwrites the pending code afterwards, so at most one
code per email is ever live.
"""

import logging
import secrets
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cinesocial_auth.core.auth import create_session_token
from cinesocial_auth.core.config import settings
from cinesocial_auth.core.errors import (
    InvalidOrExpiredCodeError,
    StoreError,
    UnauthorizedError,
    ValidationError,
)
from cinesocial_auth.core.storage import AvatarStorage
from cinesocial_auth.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

_CODE_MIN = 100_000
_CODE_SPAN = 900_000

_MISSING_FIELDS_MSG = "Missing required fields"


def generate_code() -> str:
    """Draw a 6-digit code uniformly from [100000, 999999]."""
    return str(_CODE_MIN + secrets.randbelow(_CODE_SPAN))


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _normalize(value: str | None) -> str:
    return (value or "").strip().lower()


@dataclass(frozen=True)
class IssuedCode:
    """A code that was stored and now awaits delivery.

    Attributes:
        email: Normalized recipient email.
        code: Plain 6-digit code.
        expires_at: When the code stops being redeemable.
    """

    email: str
    code: str
    expires_at: datetime


@dataclass(frozen=True)
class VerifiedSession:
    """Result of a successful code verification.

    Attributes:
        token: Session token for the Authorization header.
        username: Stored username.
        display_name: Display name, if profile setup has run.
        avatar_url: Relative avatar URL, if one was uploaded.
        is_new_user: True on the user's first successful verification.
    """

    token: str
    username: str
    display_name: str | None
    avatar_url: str | None
    is_new_user: bool


@dataclass(frozen=True)
class AvatarUpload:
    """Avatar bytes already read and validated by the API layer."""

    content: bytes
    extension: str


class VerificationSessionService:
    """Verification code lifecycle against the user directory.

    Args:
        db: Async database session.
        avatar_storage: Where avatars are written during profile setup.
        code_generator: Source of 6-digit codes.
        clock: Source of the current UTC time.
    """

    def __init__(
        self,
        db: AsyncSession,
        *,
        avatar_storage: AvatarStorage | None = None,
        code_generator: Callable[[], str] = generate_code,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._db = db
        self._avatar_storage = avatar_storage
        self._generate_code = code_generator
        self._clock = clock
        self._code_ttl = timedelta(minutes=settings.code_ttl_minutes)

    async def _commit(self) -> None:
        try:
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise StoreError(str(exc)) from exc

    # -----------------------------------------------------------------------
    # Request code
    # -----------------------------------------------------------------------

    async def request_code(self, email: str | None, username: str | None) -> IssuedCode:
        """Store a fresh code for an email, creating the user if needed.

        Delivery is left to the caller (see send_verification_code_email);
        the stored code stays valid whatever happens to the email.

        Args:
            email: Email as entered by the client.
            username: Username as entered by the client.

        Returns:
            The stored code and its normalized recipient.

        Raises:
            ValidationError: If email or username is missing or empty.
            StoreError: If the upsert fails.
        """
        normalized_email = _normalize(email)
        normalized_username = _normalize(username)
        if not normalized_email or not normalized_username:
            raise ValidationError(_MISSING_FIELDS_MSG)

        code = self._generate_code()
        expires_at = self._clock() + self._code_ttl

        await UserRepository.upsert_by_email(
            self._db,
            email=normalized_email,
            username=normalized_username,
            verification_code=code,
            code_expires_at=expires_at,
        )
        await self._commit()

        logger.info("Verification code issued for %s", normalized_email)
        return IssuedCode(email=normalized_email, code=code, expires_at=expires_at)

    # -----------------------------------------------------------------------
    # Verify code
    # -----------------------------------------------------------------------

    async def verify_code(self, email: str | None, code: str | None) -> VerifiedSession:
        """Redeem a code and issue a session token.

        Security: Wrong code, expired code and unknown email all raise the
        same InvalidOrExpiredCodeError.

        Args:
            email: Email as entered by the client.
            code: Code as entered by the client.

        Returns:
            Session token and profile snapshot.

        Raises:
            ValidationError: If email or code is missing or empty.
            InvalidOrExpiredCodeError: If no live matching code exists, or a
                concurrent request consumed it first.
            StoreError: If the store fails.
        """
        normalized_email = _normalize(email)
        presented_code = (code or "").strip()
        if not normalized_email or not presented_code:
            raise ValidationError(_MISSING_FIELDS_MSG)

        now = self._clock()
        user = await UserRepository.find_one(
            self._db, email=normalized_email, code=presented_code, now=now
        )
        if user is None:
            raise InvalidOrExpiredCodeError()

        # Captured before the update stamps last_login_at
        is_new_user = user.last_login_at is None
        user_id = user.id
        snapshot = (user.username, user.display_name, user.avatar_ref)

        consumed = await UserRepository.conditional_clear_code(
            self._db, user_id, expected_code=presented_code, now=now
        )
        await self._commit()
        if not consumed:
            raise InvalidOrExpiredCodeError()

        username, display_name, avatar_ref = snapshot
        return VerifiedSession(
            token=create_session_token(user_id),
            username=username,
            display_name=display_name,
            avatar_url=avatar_ref,
            is_new_user=is_new_user,
        )

    # -----------------------------------------------------------------------
    # Profile setup
    # -----------------------------------------------------------------------

    async def setup_profile(
        self,
        user_id: uuid.UUID,
        *,
        display_name: str | None = None,
        avatar: AvatarUpload | None = None,
    ) -> None:
        """Apply a partial profile update for an authenticated user.

        display_name is set only when non-empty after trimming; avatar_ref
        only when an avatar was uploaded. Nothing to change is a success
        that never reaches the store.

        Args:
            user_id: User the session token resolved to.
            display_name: New display name, optional.
            avatar: New avatar, optional.

        Raises:
            UnauthorizedError: If the token's user does not exist.
            StoreError: If the store or avatar write fails.
        """
        fields: dict[str, str] = {}
        trimmed_name = (display_name or "").strip()
        if trimmed_name:
            fields["display_name"] = trimmed_name

        if not fields and avatar is None:
            return

        # Check before writing the avatar so unknown tokens leave no files
        if await UserRepository.get_by_id(self._db, user_id) is None:
            raise UnauthorizedError()

        if avatar is not None:
            if self._avatar_storage is None:
                raise StoreError("Avatar storage not configured")
            try:
                fields["avatar_ref"] = await self._avatar_storage.save(
                    user_id, avatar.content, avatar.extension
                )
            except OSError as exc:
                logger.exception("Avatar write failed for user %s", user_id)
                raise StoreError("Failed to store avatar") from exc

        await UserRepository.update_fields(self._db, user_id, **fields)
        await self._commit()
