"""Object key, public URL and metadata construction."""

import time
import uuid
from datetime import datetime, timezone
from typing import Mapping, Optional

from imgtourl.services.mime import DEFAULT_EXTENSION, guess_extension


def trim_trailing_slash(value: str) -> str:
    return value.rstrip("/")


def trim_slashes(value: str) -> str:
    return value.strip("/")


def normalize_key(key: str) -> str:
    """Normalize a caller-supplied object key.

    Backslashes become forward slashes and leading slashes are dropped, so
    Windows-style paths and absolute-looking keys land where expected.
    """
    return key.replace("\\", "/").lstrip("/")


def generate_key(
    prefix: str,
    extension: str,
    now_ms: Optional[int] = None,
    random_id: Optional[str] = None,
) -> str:
    """Generate a unique object key.

    Args:
        prefix: Key prefix without surrounding slashes (may be empty)
        extension: File extension without the dot
        now_ms: Unix time in milliseconds (defaults to now)
        random_id: Random component (defaults to a UUID4)

    Returns:
        ``<prefix>/<millis>-<random>.<ext>``, or without the prefix part
        when *prefix* is empty
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if random_id is None:
        random_id = str(uuid.uuid4())

    filename = f"{now_ms}-{random_id}.{extension}"
    return f"{prefix}/{filename}" if prefix else filename


def build_key(
    key: Optional[str],
    prefix: str,
    original_name: Optional[str],
    content_type: Optional[str],
) -> str:
    """Resolve the object key for an upload.

    An explicit, non-blank *key* is used as-is after normalization.
    Otherwise a key is generated under *prefix*.
    """
    if key and key.strip():
        return normalize_key(key)

    extension = guess_extension(original_name, content_type) or DEFAULT_EXTENSION
    return generate_key(prefix, extension)


def build_public_url(base: str, key: str) -> str:
    """Join the public base URL and an object key with exactly one slash."""
    return f"{trim_trailing_slash(base)}/{key.lstrip('/')}"


def format_upload_time(moment: Optional[datetime] = None) -> str:
    """Format a timestamp as ISO-8601 UTC with millisecond precision.

    Example: ``2026-10-18T09:15:02.123Z``
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def build_metadata(
    metadata: Optional[Mapping[str, object]],
    original_name: Optional[str],
    uploaded_at: Optional[datetime] = None,
) -> dict[str, str]:
    """Build the object metadata stored alongside an upload.

    Args:
        metadata: Caller-supplied key/value pairs (values are stringified)
        original_name: Original filename, recorded as ``original-name``
        uploaded_at: Upload time (defaults to now), recorded as ``upload-time``

    Returns:
        New metadata dict; the caller's mapping is not modified
    """
    result = {str(k): str(v) for k, v in (metadata or {}).items()}
    if original_name:
        result["original-name"] = original_name
    result["upload-time"] = format_upload_time(uploaded_at)
    return result
