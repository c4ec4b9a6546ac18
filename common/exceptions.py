"""Exception classes shared by the upload client and the receiving server."""

from typing import Any


class UploadException(Exception):
    """
    Base exception class for all chunked-upload errors.
    """
    pass


class ConfigError(UploadException):
    """
    Raised when an uploader is configured with an unknown option,
    a chunk size that is not a positive multiple of 1024 bytes,
    or an option value of the wrong type.
    """
    pass


class ValidationError(UploadException):
    """
    Raised when an upload call or an incoming chunk carries invalid input
    (no files, reserved field names, malformed chunk metadata, unsafe names).
    """
    pass


class UploadError(UploadException):
    """
    Raised when a chunk request fails with a non-2xx status or a network error.

    Attributes:
        status: HTTP status code, 0 when no response was received
        response: Decoded server response body, None when unavailable
    """

    def __init__(self, status: int, response: Any = None, message: str = None):
        self.status = status
        self.response = response
        super().__init__(message or f"Upload failed with status {status}")


class ChunkWriteError(UploadException):
    """
    Raised when the server cannot write a received chunk to its destination.
    """
    pass
