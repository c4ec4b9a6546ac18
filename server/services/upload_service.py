"""Upload service: turns multipart fields into a chunk write and a response body."""

from typing import Any, Optional

from common.constants import CHUNK_DATA_FIELD, FILE_DATA_FIELD, FILE_FIELD
from common.logging_config import get_logger
from common.protocol import ChunkData, deserialize
from server.storage import ChunkReceiver

logger = get_logger(__name__)


class UploadService:
    def __init__(self, receiver: ChunkReceiver):
        self.receiver = receiver

    def store(self, upload_filename: Optional[str], content: bytes, fields: dict[str, str]) -> dict[str, Any]:
        """
        Store one incoming request and build its response body.

        Args:
            upload_filename: Filename of the multipart file part
            content: Bytes of the file part
            fields: Raw (serialised) non-file form fields

        Returns:
            Every deserialised form field plus filePath, which always names the real destination

        Raises:
            ValidationError: If chunkData is malformed or the file name is unsafe
            ChunkWriteError: If writing fails
        """
        decoded = {
            name: deserialize(value)
            for name, value in fields.items()
            if name != FILE_FIELD
        }

        chunk = None
        if CHUNK_DATA_FIELD in decoded:
            chunk = ChunkData.from_dict(decoded[CHUNK_DATA_FIELD])

        file_name = upload_filename
        file_data = decoded.get(FILE_DATA_FIELD)
        if isinstance(file_data, dict) and isinstance(file_data.get("name"), str):
            file_name = file_data["name"]

        destination = self.receiver.receive(file_name, content, chunk)

        return {**decoded, "filePath": str(destination)}
