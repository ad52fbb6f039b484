"""Services for imgtourl.

Provides the R2 upload client and the helpers it uses for content-type
inference, payload decoding and key construction.
"""

from imgtourl.services.r2 import R2ImageClient, UploadOptions, UploadResult

__all__ = ["R2ImageClient", "UploadOptions", "UploadResult"]
