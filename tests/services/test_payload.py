"""Tests for payload decoding."""

import base64

import pytest

from imgtourl.exceptions import UploadValidationError
from imgtourl.services.payload import decode_base64, to_bytes


class TestToBytes:
    """Tests for to_bytes."""

    def test_bytes_passthrough(self):
        data = b"abc"
        assert to_bytes(data) is data

    def test_bytearray_and_memoryview(self):
        assert to_bytes(bytearray(b"abc")) == b"abc"
        assert to_bytes(memoryview(b"xabcx")[1:4]) == b"abc"

    def test_rejects_str(self):
        with pytest.raises(TypeError, match="str"):
            to_bytes("abc")


class TestDecodeBase64:
    """Tests for decode_base64."""

    def test_bare_base64(self, png_bytes):
        """A bare string decodes without content type or name."""
        decoded = decode_base64(base64.b64encode(png_bytes).decode())

        assert decoded.data == png_bytes
        assert decoded.content_type is None
        assert decoded.original_name is None

    def test_data_uri(self, png_bytes):
        """A data URI carries its MIME type and a synthetic filename."""
        encoded = base64.b64encode(png_bytes).decode()
        decoded = decode_base64(f"  data:image/png;base64,{encoded}\n")

        assert decoded.data == png_bytes
        assert decoded.content_type == "image/png"
        assert decoded.original_name == "upload.png"

    def test_data_uri_unknown_mime_defaults_to_jpg_name(self):
        decoded = decode_base64("data:image/heic;base64,AAEC")

        assert decoded.content_type == "image/heic"
        assert decoded.original_name == "upload.jpg"

    def test_data_uri_non_image_mime_is_not_rejected_here(self):
        """Content-type checks happen at upload time, not while decoding."""
        decoded = decode_base64("data:text/plain;base64,aGk=")
        assert decoded.content_type == "text/plain"
        assert decoded.data == b"hi"

    def test_missing_padding_and_whitespace(self):
        """Unpadded and line-wrapped input is tolerated."""
        assert decode_base64("aGVs\nbG8") == decode_base64("aGVsbG8=")
        assert decode_base64("aGVsbG8").data == b"hello"

    def test_urlsafe_alphabet(self):
        raw = b"\xfb\xff\xbf"
        encoded = base64.urlsafe_b64encode(raw).decode()
        assert "-" in encoded or "_" in encoded
        assert decode_base64(encoded).data == raw

    def test_invalid_characters_rejected(self):
        with pytest.raises(UploadValidationError, match="Invalid base64 payload"):
            decode_base64("not*valid*base64!")

    def test_impossible_length_rejected(self):
        with pytest.raises(UploadValidationError, match="Invalid base64 payload"):
            decode_base64("abcde")
