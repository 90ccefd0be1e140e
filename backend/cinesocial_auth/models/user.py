"""User model - directory record for passwordless sign-in.

One row per email. The same row serves signup and login: requesting a code
upserts it, verifying the code consumes it.
"""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from cinesocial_auth.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """User directory record.

    Attributes:
        id: UUID primary key. Generated on first upsert, never changed.
            Doubles as the session token in raw-id mode.
        email: Unique, lowercased email address.
        username: Lowercased handle given at signup.
        display_name: Optional name set during profile setup.
        avatar_ref: Relative URL of the stored avatar. NULL = no avatar.
        verification_code: Outstanding 6-digit code. NULL = none outstanding.
        code_expires_at: Expiry of the outstanding code. NULL iff
            verification_code is NULL.
        last_login_at: Last successful verification. NULL = never verified.
        created_at: Record creation timestamp (from TimestampMixin).
        updated_at: Last modification timestamp (from TimestampMixin).
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "(verification_code IS NULL) = (code_expires_at IS NULL)",
            name="ck_users_code_pair",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    username: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    display_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    avatar_ref: Mapped[str | None] = mapped_column(
        Text(),
        nullable=True,
    )
    verification_code: Mapped[str | None] = mapped_column(
        String(6),
        nullable=True,
    )
    code_expires_at: Mapped[datetime | None] = mapped_column(
        nullable=True,
    )
    last_login_at: Mapped[datetime | None] = mapped_column(
        nullable=True,
    )
