"""Multipart wire format shared by the uploader and the receiving server."""

import json
from dataclasses import dataclass
from typing import Any, Optional

from common.constants import CHUNK_DATA_FIELD, FILE_DATA_FIELD, RESERVED_FIELDS
from common.exceptions import ValidationError
from common.logging_config import get_logger
from common.types import AdditionalFormData, ChunkRange, ChunkSequenceMetadata, FileDescriptor

logger = get_logger(__name__)


def serialize(value: Any) -> str:
    """Return strings unchanged, JSON-encode everything else."""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def deserialize(value: str) -> Any:
    """JSON-decode a form value, falling back to the raw string."""
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return value


@dataclass(frozen=True)
class ChunkData:
    """Chunk metadata carried in the chunkData form field."""
    sequence: int
    total_chunks: int
    start_byte: int
    end_byte: int

    @classmethod
    def build(cls, chunk: ChunkSequenceMetadata, chunk_range: ChunkRange) -> 'ChunkData':
        return cls(
            sequence=chunk.sequence,
            total_chunks=chunk.total_chunks,
            start_byte=chunk_range.start_byte,
            end_byte=chunk_range.end_byte,
        )

    @classmethod
    def from_dict(cls, data: Any) -> 'ChunkData':
        """
        Parse and validate a decoded chunkData value.

        Raises:
            ValidationError: If fields are missing, not integers, or out of range
        """
        if not isinstance(data, dict):
            raise ValidationError("chunkData must be a JSON object")

        values = {}
        for key in ("sequence", "totalChunks", "startByte", "endByte"):
            value = data.get(key)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"chunkData.{key} must be an integer")
            values[key] = value

        ChunkSequenceMetadata(values["sequence"], values["totalChunks"])
        if values["startByte"] < 0 or values["endByte"] < values["startByte"]:
            raise ValidationError(
                f"chunkData byte range [{values['startByte']}, {values['endByte']}) is invalid"
            )

        return cls(
            sequence=values["sequence"],
            total_chunks=values["totalChunks"],
            start_byte=values["startByte"],
            end_byte=values["endByte"],
        )

    def to_dict(self) -> dict:
        return {
            "sequence": self.sequence,
            "totalChunks": self.total_chunks,
            "startByte": self.start_byte,
            "endByte": self.end_byte,
        }

    @property
    def is_final(self) -> bool:
        return self.sequence == self.total_chunks


def build_form_fields(
    descriptor: FileDescriptor,
    additional_form_data: Optional[AdditionalFormData] = None,
    chunk_data: Optional[ChunkData] = None,
) -> dict:
    """
    Build the non-file multipart fields of one request.

    Args:
        descriptor: Descriptor of the file being uploaded
        additional_form_data: Optional caller metadata (string, dict or list data)
        chunk_data: Chunk metadata, omitted for unchunked uploads

    Returns:
        Dictionary of field name to serialised string value

    Raises:
        ValidationError: If the additional field name is reserved
    """
    fields = {FILE_DATA_FIELD: serialize(descriptor.to_dict())}

    if additional_form_data is not None:
        name = additional_form_data.field_name
        if name in RESERVED_FIELDS:
            raise ValidationError(f"'{name}' is a reserved form field name")
        if isinstance(name, str) and isinstance(additional_form_data.data, (str, dict, list)):
            fields[name] = serialize(additional_form_data.data)
        else:
            logger.warning(f"Ignoring additional form data with unsupported type: {name!r}")

    if chunk_data is not None:
        fields[CHUNK_DATA_FIELD] = serialize(chunk_data.to_dict())

    return fields
