"""SQLAlchemy ORM models for CineSocial Auth.

All models are exported from this module for convenient imports:
    from cinesocial_auth.models import User
"""

from cinesocial_auth.models.base import Base, TimestampMixin
from cinesocial_auth.models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
]
