"""Content-type inference for image uploads.

Maps file extensions to MIME types (and back) using a fixed table of
web-safe image formats. Anything outside the table is left for the caller
to supply explicitly.
"""

from pathlib import PurePath
from typing import Optional

from imgtourl.exceptions import UploadValidationError

DEFAULT_CONTENT_TYPE = "image/jpeg"
DEFAULT_EXTENSION = "jpg"

MIME_BY_EXT = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".svg": "image/svg+xml",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".ico": "image/x-icon",
}

EXT_BY_MIME = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/bmp": "bmp",
    "image/svg+xml": "svg",
    "image/tiff": "tiff",
    "image/x-icon": "ico",
}


def _suffix(name: Optional[str]) -> str:
    if not name:
        return ""
    # PurePath treats a leading dot as part of the stem (".png" has no suffix);
    # a bare trailing dot ("photo.") counts as no extension
    suffix = PurePath(name.replace("\\", "/")).suffix.lower()
    return "" if suffix == "." else suffix


def guess_content_type(name: Optional[str]) -> Optional[str]:
    """Guess an image content type from a filename.

    Args:
        name: Filename or path (may be None)

    Returns:
        MIME type from the extension table, or None if unknown
    """
    return MIME_BY_EXT.get(_suffix(name))


def guess_extension(name: Optional[str], content_type: Optional[str]) -> Optional[str]:
    """Pick the extension to use for a generated object key.

    The filename's own extension wins, even when it is not in the table.
    Otherwise the extension is looked up from the content type.

    Args:
        name: Original filename (may be None)
        content_type: Resolved MIME type (may be None)

    Returns:
        Extension without the leading dot, or None
    """
    suffix = _suffix(name)
    if suffix:
        return suffix[1:]
    if content_type:
        return EXT_BY_MIME.get(content_type)
    return None


def ensure_image_content_type(content_type: Optional[str]) -> str:
    """Check that a content type describes an image.

    Args:
        content_type: MIME type to check

    Returns:
        The content type unchanged

    Raises:
        UploadValidationError: If it is empty or not an ``image/*`` type
    """
    if not content_type:
        raise UploadValidationError(
            "Unable to determine content type. "
            "Provide a content type or a filename with an image extension."
        )
    if not content_type.startswith("image/"):
        raise UploadValidationError(
            f"Only image uploads are allowed. Received content type: {content_type}"
        )
    return content_type
