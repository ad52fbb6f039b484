"""Cloudflare R2 image upload client.

Uploads images to Cloudflare R2, which exposes an S3-compatible API, and
returns the public URL the object is served from. Every upload is a single
``put_object`` call; payloads are validated locally first.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional, Union

import boto3

from imgtourl.config import UploaderConfig
from imgtourl.exceptions import UploadValidationError
from imgtourl.services.keys import (
    build_key,
    build_metadata,
    build_public_url,
    trim_slashes,
    trim_trailing_slash,
)
from imgtourl.services.mime import (
    DEFAULT_CONTENT_TYPE,
    ensure_image_content_type,
    guess_content_type,
)
from imgtourl.services.payload import BytesLike, decode_base64, to_bytes

logger = logging.getLogger(__name__)


@dataclass
class UploadOptions:
    """Per-upload options.

    Attributes:
        key: Explicit object key; replaces the generated key
        original_name: Filename recorded in metadata and used for inference
        content_type: Explicit MIME type (must start with ``image/``)
        metadata: Extra object metadata

    Only None means "not given"; an empty name or content type is used
    as-is (an empty content type is then rejected).
    """

    key: Optional[str] = None
    original_name: Optional[str] = None
    content_type: Optional[str] = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class UploadResult:
    """Result of a successful upload.

    Attributes:
        url: Public URL of the object
        key: Object key within the bucket
        bucket: Bucket name
        size: Uploaded size in bytes
        type: Content type stored on the object
        etag: ETag returned by R2, if any
    """

    url: str
    key: str
    bucket: str
    size: int
    type: str
    etag: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            "url": self.url,
            "key": self.key,
            "bucket": self.bucket,
            "size": self.size,
            "type": self.type,
        }
        if self.etag is not None:
            result["etag"] = self.etag
        return result


class R2ImageClient:
    """Client that uploads images to Cloudflare R2.

    Attributes:
        bucket: R2 bucket name
        public_url: Public base URL (no trailing slash)
        prefix: Prefix for generated keys (no surrounding slashes)
        max_size: Largest accepted payload in bytes
        cache_control: Cache-Control header stored on each object
        endpoint_url: S3 endpoint used by the underlying boto3 client
    """

    def __init__(self, config: UploaderConfig):
        """Initialize the R2 client.

        Args:
            config: Uploader configuration

        Raises:
            ConfigError: If a required configuration value is missing
        """
        config.validate()

        self.bucket = config.bucket
        self.public_url = trim_trailing_slash(config.public_url)
        self.prefix = trim_slashes(config.key_prefix)
        self.max_size = config.max_size_bytes
        self.cache_control = config.cache_control
        self.endpoint_url = config.endpoint()
        self.region = config.region

        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=self.region,
        )

    def upload_file(
        self, file_path: Union[str, Path], options: Optional[UploadOptions] = None
    ) -> UploadResult:
        """Upload an image file from disk.

        Args:
            file_path: Local path to the image
            options: Upload options; the filename and extension-based content
                type are filled in when not given

        Returns:
            UploadResult for the stored object

        Raises:
            FileNotFoundError: If *file_path* does not exist
            UploadValidationError: If the path is not a regular file or the
                payload is rejected
        """
        path = Path(file_path)
        if not path.exists():
            logger.warning(f"Rejected upload: file not found: {path}")
            raise FileNotFoundError(f"File not found: {path}")
        if not path.is_file():
            logger.warning(f"Rejected upload: path is not a file: {path}")
            raise UploadValidationError(f"Path is not a file: {path}")

        options = options or UploadOptions()
        original_name = path.name if options.original_name is None else options.original_name
        content_type = options.content_type
        if content_type is None:
            content_type = guess_content_type(original_name)

        logger.debug(f"Read {path} for upload")
        return self.upload_bytes(
            path.read_bytes(),
            replace(options, original_name=original_name, content_type=content_type),
        )

    def upload_base64(
        self, value: str, options: Optional[UploadOptions] = None
    ) -> UploadResult:
        """Upload an image given as base64 or as a ``data:`` URI.

        Explicit options take precedence over the content type and filename
        carried by a data URI.

        Raises:
            UploadValidationError: If the payload cannot be decoded or is rejected
        """
        try:
            decoded = decode_base64(value)
        except UploadValidationError as e:
            logger.warning(f"Rejected upload: {e}")
            raise

        options = options or UploadOptions()
        if options.original_name is None:
            options = replace(options, original_name=decoded.original_name)
        if options.content_type is None:
            options = replace(options, content_type=decoded.content_type)
        return self.upload_bytes(decoded.data, options)

    def upload_bytes(
        self, data: BytesLike, options: Optional[UploadOptions] = None
    ) -> UploadResult:
        """Validate and upload an in-memory image.

        Args:
            data: Image bytes
            options: Upload options

        Returns:
            UploadResult for the stored object

        Raises:
            UploadValidationError: If the payload is empty, too large, or not
                an image
            botocore.exceptions.ClientError: If R2 rejects the request
        """
        options = options or UploadOptions()
        body = to_bytes(data)

        if len(body) == 0:
            logger.warning("Rejected empty upload")
            raise UploadValidationError("Cannot upload an empty file.")

        if len(body) > self.max_size:
            limit_mb = self.max_size / (1024 * 1024)
            logger.warning(f"Rejected upload of {len(body)} bytes (limit {self.max_size})")
            raise UploadValidationError(
                f"File is larger than the allowed limit ({limit_mb:.1f} MB)."
            )

        content_type = options.content_type
        if content_type is None:
            content_type = guess_content_type(options.original_name) or DEFAULT_CONTENT_TYPE
        try:
            ensure_image_content_type(content_type)
        except UploadValidationError as e:
            logger.warning(f"Rejected upload: {e}")
            raise

        key = build_key(options.key, self.prefix, options.original_name, content_type)
        metadata = build_metadata(options.metadata, options.original_name)

        logger.info(f"Uploading {len(body)} bytes to {self.bucket}/{key} ({content_type})")
        response = self._client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            ContentLength=len(body),
            CacheControl=self.cache_control,
            Metadata=metadata,
        )

        return UploadResult(
            url=build_public_url(self.public_url, key),
            key=key,
            bucket=self.bucket,
            size=len(body),
            type=content_type,
            etag=response.get("ETag") if response else None,
        )


def create_client_from_env(env: Optional[Mapping[str, str]] = None) -> R2ImageClient:
    """Create a client configured purely from environment variables.

    Args:
        env: Environment mapping (defaults to ``os.environ``)

    Raises:
        ConfigError: If a required variable is missing
    """
    return R2ImageClient(UploaderConfig.from_env(os.environ if env is None else env))
