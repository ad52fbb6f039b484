"""imgtourl - upload images to Cloudflare R2 and get a public URL.

This package provides:
- A small client library that validates an image and stores it in R2
- An ``imgtourl`` command-line tool wrapping the same client
"""

__version__ = "0.1.0"

from imgtourl.config import UploaderConfig
from imgtourl.exceptions import ConfigError, ImgToUrlError, UploadValidationError
from imgtourl.services.r2 import (
    R2ImageClient,
    UploadOptions,
    UploadResult,
    create_client_from_env,
)

__all__ = [
    "ConfigError",
    "ImgToUrlError",
    "R2ImageClient",
    "UploadOptions",
    "UploadResult",
    "UploadValidationError",
    "UploaderConfig",
    "create_client_from_env",
]
