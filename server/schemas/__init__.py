"""Pydantic schemas for API requests and responses."""

from server.schemas.upload import UploadResponse
from server.schemas.common import ErrorResponse

__all__ = [
    "UploadResponse",
    "ErrorResponse"
]
