"""Service layer for upload handling."""

from server.services.upload_service import UploadService

__all__ = [
    "UploadService",
]
