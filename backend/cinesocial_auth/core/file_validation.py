"""File validation utilities for avatar uploads.

Security: Enforces size limits while reading and restricts avatars to
image extensions, since the extension is reused in the stored filename.
"""

from pathlib import PurePath
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from fastapi import UploadFile

from cinesocial_auth.core.errors import ValidationError

logger = structlog.get_logger()

# Chunk size for reading files (64 KB)
CHUNK_SIZE_BYTES = 64 * 1024

# Allowed avatar extensions (lowercase, with dot)
ALLOWED_AVATAR_EXTENSIONS: frozenset[str] = frozenset(
    {".jpg", ".jpeg", ".png", ".gif", ".webp"}
)


async def read_file_with_size_limit(
    file: "UploadFile",
    max_size: int,
) -> bytes:
    """Read file content with size limit to prevent DoS.

    Args:
        file: UploadFile from FastAPI.
        max_size: Maximum allowed file size in bytes.

    Returns:
        File content as bytes.

    Raises:
        ValidationError: If file exceeds size limit.
    """
    chunks: list[bytes] = []
    total_size = 0

    while True:
        chunk = await file.read(CHUNK_SIZE_BYTES)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_size:
            raise ValidationError(
                message=f"File too large. Maximum size: {max_size // (1024 * 1024)}MB",
                details=[{"field": "avatar", "error": "FILE_TOO_LARGE"}],
            )
        chunks.append(chunk)

    return b"".join(chunks)


def avatar_extension(filename: str | None) -> str:
    """Return the lowercased extension of an avatar upload.

    Args:
        filename: Original client filename.

    Returns:
        Extension including the dot (e.g. ".png").

    Raises:
        ValidationError: If the extension is missing or not an image type.
    """
    suffix = PurePath(filename or "").suffix.lower()
    if suffix not in ALLOWED_AVATAR_EXTENSIONS:
        # Log the rejected name for server-side debugging; do NOT echo it back
        logger.warning("Avatar extension rejected", filename=filename)
        raise ValidationError(
            message="Invalid avatar type. Allowed: JPG, PNG, GIF, WEBP.",
            details=[{"field": "avatar", "error": "INVALID_FILE_TYPE"}],
        )
    return suffix
