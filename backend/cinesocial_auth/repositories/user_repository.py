"""Repository for the user directory store.

Provides the directory store operations the verification flow relies on:
upsert-by-email, lookup of a live code, atomic compare-and-clear of a code,
and partial profile updates. Every SQLAlchemy failure surfaces as StoreError.
"""

import uuid
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cinesocial_auth.core.errors import StoreError
from cinesocial_auth.models.user import User

# Fields that may be updated via UserRepository.update_fields().
# Security: Never add 'id', 'email', code columns, or timestamps.
# - id: primary key, immutable, doubles as the session token
# - email: natural key
# - verification_code/code_expires_at/last_login_at: owned by the code lifecycle
_UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {
        "display_name",
        "avatar_ref",
    }
)

# Dialect-specific INSERT constructs that support ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class UserRepository:
    """Stateless repository for User table operations.

    All methods are static, with no instance state. Pass an AsyncSession
    for every call so the caller controls transaction boundaries.
    """

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: uuid.UUID) -> User | None:
        """Fetch a user by primary key.

        Args:
            db: Async database session.
            user_id: UUID primary key.

        Returns:
            User if found, None otherwise.

        Raises:
            StoreError: If the database call fails.
        """
        try:
            return await db.get(User, user_id, populate_existing=True)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """Fetch a user by email address (case-insensitive).

        Args:
            db: Async database session.
            email: Email address to look up.

        Returns:
            User if found, None otherwise.

        Raises:
            StoreError: If the database call fails.
        """
        stmt = (
            select(User)
            .where(User.email == email.strip().lower())
            .execution_options(populate_existing=True)
        )
        try:
            result = await db.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        return result.scalar_one_or_none()

    @staticmethod
    async def upsert_by_email(
        db: AsyncSession,
        *,
        email: str,
        username: str,
        verification_code: str,
        code_expires_at: datetime,
    ) -> None:
        """Insert a user or overwrite its username and pending code.

        A single INSERT ... ON CONFLICT (email) DO UPDATE, so signup and
        login share one atomic write. Any previously outstanding code for
        the email is replaced.

        Args:
            db: Async database session.
            email: Normalized (lowercase) email.
            username: Normalized (lowercase) username.
            verification_code: Freshly generated code.
            code_expires_at: Code expiry timestamp.

        Raises:
            StoreError: If the dialect has no upsert support or the write fails.
        """
        dialect = db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            msg = f"Upsert not supported for dialect '{dialect}'"
            raise StoreError(msg)

        stmt = insert(User).values(
            email=email,
            username=username,
            verification_code=verification_code,
            code_expires_at=code_expires_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[User.email],
            set_={
                "username": stmt.excluded.username,
                "verification_code": stmt.excluded.verification_code,
                "code_expires_at": stmt.excluded.code_expires_at,
                "updated_at": func.now(),
            },
        )
        try:
            await db.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    @staticmethod
    async def find_one(
        db: AsyncSession,
        *,
        email: str,
        code: str,
        now: datetime,
    ) -> User | None:
        """Find the user holding a live matching code.

        Security: Returns None for a wrong code, an expired code and an
        unknown email alike.

        Args:
            db: Async database session.
            email: Normalized (lowercase) email.
            code: Code presented by the client.
            now: Current time; codes expiring before it are ignored.

        Returns:
            User if a live matching code exists, None otherwise.

        Raises:
            StoreError: If the database call fails.
        """
        # populate_existing: last_login_at must be the stored value, not a
        # copy cached earlier in this session
        stmt = (
            select(User)
            .where(
                User.email == email,
                User.verification_code == code,
                User.code_expires_at >= now,
            )
            .execution_options(populate_existing=True)
        )
        try:
            result = await db.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        return result.scalar_one_or_none()

    @staticmethod
    async def conditional_clear_code(
        db: AsyncSession,
        user_id: uuid.UUID,
        *,
        expected_code: str,
        now: datetime,
    ) -> bool:
        """Consume a code only if it is still outstanding and unexpired.

        One conditional UPDATE: clears both code columns and stamps
        last_login_at. Concurrent callers racing on the same code serialize
        on the row, and only the first sees a matching row.

        Args:
            db: Async database session.
            user_id: UUID of the user found by find_one().
            expected_code: The code being redeemed.
            now: Current time, also written to last_login_at.

        Returns:
            True if the code was consumed, False if it no longer matched.

        Raises:
            StoreError: If the database call fails.
        """
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.verification_code == expected_code,
                User.code_expires_at >= now,
            )
            .values(
                verification_code=None,
                code_expires_at=None,
                last_login_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count == 1

    @staticmethod
    async def update_fields(
        db: AsyncSession,
        user_id: uuid.UUID,
        **kwargs: str | None,
    ) -> bool:
        """Update profile fields.

        Only fields in _UPDATABLE_FIELDS are allowed. Unknown field names
        raise ValueError. An empty update does not touch the database.

        Args:
            db: Async database session.
            user_id: UUID of the user to update.
            **kwargs: Field names and values to update.

        Returns:
            True if the user exists (or nothing was asked), False otherwise.

        Raises:
            ValueError: If an unknown field name is passed.
            StoreError: If the database call fails.
        """
        unknown = set(kwargs) - _UPDATABLE_FIELDS
        if unknown:
            msg = f"Unknown fields: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        if not kwargs:
            return True

        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(**kwargs)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count == 1
