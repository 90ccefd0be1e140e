"""Tests for avatar upload validation.

Security: Tests for size limits and the avatar extension whitelist.
"""

from unittest.mock import AsyncMock

import pytest

from cinesocial_auth.core.errors import ValidationError
from cinesocial_auth.core.file_validation import (
    CHUNK_SIZE_BYTES,
    avatar_extension,
    read_file_with_size_limit,
)


class TestReadFileWithSizeLimit:
    """Tests for read_file_with_size_limit function."""

    async def test_reads_file_within_limit(self) -> None:
        """Should read file content when under size limit."""
        content = b"\x89PNG\r\n\x1a\n"
        mock_file = AsyncMock()
        mock_file.read = AsyncMock(side_effect=[content, b""])

        result = await read_file_with_size_limit(mock_file, max_size=1024)

        assert result == content

    async def test_reads_file_in_chunks(self) -> None:
        """Should read file in fixed-size chunks."""
        chunk1 = b"A" * 1000
        chunk2 = b"B" * 1000
        mock_file = AsyncMock()
        mock_file.read = AsyncMock(side_effect=[chunk1, chunk2, b""])

        result = await read_file_with_size_limit(mock_file, max_size=4096)

        assert result == chunk1 + chunk2
        mock_file.read.assert_awaited_with(CHUNK_SIZE_BYTES)

    async def test_rejects_file_exceeding_limit(self) -> None:
        """Should raise ValidationError as soon as the limit is crossed."""
        mock_file = AsyncMock()
        mock_file.read = AsyncMock(side_effect=[b"X" * 60, b"X" * 60, b""])

        with pytest.raises(ValidationError) as exc_info:
            await read_file_with_size_limit(mock_file, max_size=100)

        assert "File too large" in exc_info.value.message
        assert exc_info.value.details[0]["error"] == "FILE_TOO_LARGE"
        assert mock_file.read.await_count == 2

    async def test_accepts_file_at_exact_limit(self) -> None:
        """A file of exactly max_size bytes is allowed."""
        mock_file = AsyncMock()
        mock_file.read = AsyncMock(side_effect=[b"X" * 100, b""])

        result = await read_file_with_size_limit(mock_file, max_size=100)

        assert len(result) == 100


class TestAvatarExtension:
    """Tests for avatar_extension function."""

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("me.png", ".png"),
            ("ME.PNG", ".png"),
            ("photo.jpeg", ".jpeg"),
            ("photo.final.JPG", ".jpg"),
            ("anim.gif", ".gif"),
            ("pic.webp", ".webp"),
        ],
    )
    def test_accepts_image_extensions(self, filename: str, expected: str) -> None:
        """Image extensions are returned lowercased with the dot."""
        assert avatar_extension(filename) == expected

    @pytest.mark.parametrize(
        "filename", ["resume.pdf", "script.sh", "noextension", "", None, "evil.png.exe"]
    )
    def test_rejects_other_extensions(self, filename: str | None) -> None:
        """Anything but an image extension is a validation error."""
        with pytest.raises(ValidationError) as exc_info:
            avatar_extension(filename)

        assert exc_info.value.details[0]["error"] == "INVALID_FILE_TYPE"

    def test_error_does_not_echo_filename(self) -> None:
        """Rejected filenames are not reflected back to the client."""
        with pytest.raises(ValidationError) as exc_info:
            avatar_extension("<script>.html")

        assert "<script>" not in exc_info.value.message
