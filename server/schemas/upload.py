"""Pydantic schemas for the upload endpoint."""

from pydantic import BaseModel, ConfigDict


class UploadResponse(BaseModel):
    """
    Response model for an upload request.

    Besides filePath, every non-file form field of the request is echoed
    back deserialised (fileData, chunkData and caller metadata).
    """
    model_config = ConfigDict(extra="allow")

    filePath: str
