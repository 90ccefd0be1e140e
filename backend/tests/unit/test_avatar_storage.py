"""Tests for local avatar storage."""

import uuid
from pathlib import Path
from unittest.mock import patch

import pytest

from cinesocial_auth.core.storage import AvatarStorage, avatar_filename

_USER_ID = uuid.UUID("11111111-2222-3333-4444-555555555555")


def test_avatar_filename_format():
    """Filename is <userId>-<epochMillis><ext>."""
    assert (
        avatar_filename(_USER_ID, 1_700_000_000_123, ".png")
        == "11111111-2222-3333-4444-555555555555-1700000000123.png"
    )


class TestAvatarStorage:
    """Tests for AvatarStorage.save()."""

    async def test_writes_file_and_returns_url(self, tmp_path: Path):
        """Bytes land under the root and the URL uses the public prefix."""
        storage = AvatarStorage(tmp_path / "avatars", "/uploads/")

        with patch("cinesocial_auth.core.storage.time") as mock_time:
            mock_time.time_ns.return_value = 1_700_000_000_123_456_789
            url = await storage.save(_USER_ID, b"img", ".png")

        filename = f"{_USER_ID}-1700000000123.png"
        assert url == f"/uploads/{filename}"
        assert (tmp_path / "avatars" / filename).read_bytes() == b"img"

    async def test_creates_missing_root(self, tmp_path: Path):
        """The storage directory is created on first write."""
        root = tmp_path / "nested" / "avatars"
        storage = AvatarStorage(root, "/uploads")

        await storage.save(_USER_ID, b"img", ".gif")

        assert root.is_dir()
        assert len(list(root.iterdir())) == 1

    async def test_same_millisecond_does_not_overwrite(self, tmp_path: Path):
        """A name collision fails instead of replacing the earlier avatar."""
        storage = AvatarStorage(tmp_path, "/uploads")

        with patch("cinesocial_auth.core.storage.time") as mock_time:
            mock_time.time_ns.return_value = 1_700_000_000_000_000_000
            await storage.save(_USER_ID, b"first", ".png")
            with pytest.raises(FileExistsError):
                await storage.save(_USER_ID, b"second", ".png")

        assert (tmp_path / f"{_USER_ID}-1700000000000.png").read_bytes() == b"first"
