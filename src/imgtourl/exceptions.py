"""Exceptions raised by imgtourl.

All of them derive from ``ValueError`` so callers that only care about
"bad input" can catch one type.
"""


class ImgToUrlError(ValueError):
    """Base class for imgtourl errors."""

    pass


class ConfigError(ImgToUrlError):
    """A required configuration value is missing or invalid."""

    pass


class UploadValidationError(ImgToUrlError):
    """The payload was rejected before any network call was made."""

    pass
