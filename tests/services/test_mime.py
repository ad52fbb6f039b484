"""Tests for content-type inference."""

import pytest

from imgtourl.exceptions import UploadValidationError
from imgtourl.services.mime import (
    ensure_image_content_type,
    guess_content_type,
    guess_extension,
)


class TestGuessContentType:
    """Tests for guess_content_type."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("cat.jpg", "image/jpeg"),
            ("cat.JPEG", "image/jpeg"),
            ("dir/logo.png", "image/png"),
            ("anim.gif", "image/gif"),
            ("photo.webp", "image/webp"),
            ("icon.svg", "image/svg+xml"),
            ("scan.tif", "image/tiff"),
            ("favicon.ico", "image/x-icon"),
        ],
    )
    def test_known_extensions(self, name, expected):
        """Known extensions map to their MIME type, case-insensitively."""
        assert guess_content_type(name) == expected

    def test_unknown_extension(self):
        """Extensions outside the table are not guessed."""
        assert guess_content_type("notes.txt") is None

    def test_no_name(self):
        """None and names without an extension give None."""
        assert guess_content_type(None) is None
        assert guess_content_type("README") is None

    def test_windows_path(self):
        """Backslash-separated paths still resolve the extension."""
        assert guess_content_type("C:\\images\\cat.png") == "image/png"


class TestGuessExtension:
    """Tests for guess_extension."""

    def test_filename_extension_wins(self):
        """The filename's extension is used even if the content type differs."""
        assert guess_extension("cat.PNG", "image/jpeg") == "png"

    def test_unknown_filename_extension_kept(self):
        """Any filename extension is kept, not only known image ones."""
        assert guess_extension("cat.heic", "image/heic") == "heic"

    def test_falls_back_to_content_type(self):
        """Without a filename extension the content type decides."""
        assert guess_extension("upload", "image/svg+xml") == "svg"
        assert guess_extension(None, "image/tiff") == "tiff"

    def test_bare_trailing_dot_uses_content_type(self):
        """A name ending in a lone dot has no extension of its own."""
        assert guess_extension("photo.", "image/png") == "png"
        assert guess_content_type("photo.") is None

    def test_nothing_known(self):
        """Unknown content type and no filename yields None."""
        assert guess_extension(None, "image/heic") is None


class TestEnsureImageContentType:
    """Tests for ensure_image_content_type."""

    def test_accepts_image_types(self):
        assert ensure_image_content_type("image/avif") == "image/avif"

    def test_rejects_non_image(self):
        """Non-image types are rejected with the received type in the message."""
        with pytest.raises(UploadValidationError, match="Received content type: text/plain"):
            ensure_image_content_type("text/plain")

    def test_rejects_empty(self):
        with pytest.raises(UploadValidationError, match="Unable to determine content type"):
            ensure_image_content_type("")
