"""Local filesystem storage for avatars.

Avatars are written under AVATAR_STORAGE_DIR and served by StaticFiles at
AVATAR_URL_PREFIX. Filenames are unique per (user, millisecond), so writes
never overwrite each other and need no locking.
"""

import asyncio
import logging
import time
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


def avatar_filename(user_id: uuid.UUID, timestamp_ms: int, extension: str) -> str:
    """Build the stored filename for an avatar.

    Args:
        user_id: Owner of the avatar.
        timestamp_ms: Upload time in epoch milliseconds.
        extension: Lowercased extension including the dot.

    Returns:
        Filename such as ``<uuid>-1700000000000.png``.
    """
    return f"{user_id}-{timestamp_ms}{extension}"


class AvatarStorage:
    """Writes avatar blobs to disk and hands back public URLs.

    Args:
        root: Directory the files are written to.
        url_prefix: Public path prefix the directory is mounted at.
    """

    def __init__(self, root: Path, url_prefix: str) -> None:
        self._root = root
        self._url_prefix = url_prefix.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def ensure_root(self) -> None:
        """Create the storage directory if needed."""
        self._root.mkdir(parents=True, exist_ok=True)

    async def save(self, user_id: uuid.UUID, content: bytes, extension: str) -> str:
        """Persist an avatar and return its relative URL.

        Args:
            user_id: Owner of the avatar.
            content: Raw file bytes.
            extension: Lowercased extension including the dot.

        Returns:
            Relative URL under the public prefix.

        Raises:
            OSError: If the file cannot be written.
        """
        filename = avatar_filename(user_id, time.time_ns() // 1_000_000, extension)
        path = self._root / filename
        await asyncio.to_thread(self._write, path, content)
        logger.info("Stored avatar %s (%d bytes)", filename, len(content))
        return f"{self._url_prefix}/{filename}"

    def _write(self, path: Path, content: bytes) -> None:
        self.ensure_root()
        with path.open("xb") as fh:
            fh.write(content)
