"""Payload decoding for in-memory uploads.

Turns the accepted in-memory inputs (byte buffers, bare base64 strings and
``data:`` URIs) into raw bytes plus whatever naming hints they carry.
"""

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Optional, Union

from imgtourl.exceptions import UploadValidationError
from imgtourl.services.mime import DEFAULT_EXTENSION, EXT_BY_MIME

BytesLike = Union[bytes, bytearray, memoryview]

_DATA_URI_RE = re.compile(r"^data:([^;]+);base64,(.+)$", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class DecodedPayload:
    """Bytes decoded from a base64 string.

    Attributes:
        data: Decoded bytes
        content_type: MIME type from a data URI, if any
        original_name: Synthetic filename derived from the data URI, if any
    """

    data: bytes
    content_type: Optional[str] = None
    original_name: Optional[str] = None


def to_bytes(data: BytesLike) -> bytes:
    """Coerce a bytes-like buffer to immutable bytes.

    Raises:
        TypeError: If *data* is not bytes, bytearray or memoryview
    """
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"Expected bytes-like data, got {type(data).__name__}")


def _b64decode(encoded: str) -> bytes:
    compact = _WHITESPACE_RE.sub("", encoded)
    compact += "=" * (-len(compact) % 4)
    try:
        if "-" in compact or "_" in compact:
            return base64.b64decode(compact, altchars=b"-_", validate=True)
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise UploadValidationError("Invalid base64 payload.") from e


def decode_base64(value: str) -> DecodedPayload:
    """Decode a bare base64 string or a ``data:<mime>;base64,`` URI.

    Args:
        value: Encoded payload

    Returns:
        DecodedPayload; content type and name are only set for data URIs

    Raises:
        UploadValidationError: If the payload is not valid base64
    """
    value = value.strip()

    match = _DATA_URI_RE.match(value)
    if match:
        mime, encoded = match.group(1), match.group(2)
        extension = EXT_BY_MIME.get(mime, DEFAULT_EXTENSION)
        return DecodedPayload(
            data=_b64decode(encoded),
            content_type=mime,
            original_name=f"upload.{extension}",
        )

    return DecodedPayload(data=_b64decode(value))
