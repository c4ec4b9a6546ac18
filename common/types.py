"""Shared data type definitions (FileDescriptor, ChunkRange, ChunkSequenceMetadata, etc.)."""

import mimetypes
import os
from dataclasses import dataclass, field
from typing import Any, Optional

from common.exceptions import ValidationError


@dataclass(frozen=True)
class FileDescriptor:
    """
    Metadata describing one source file, computed once before chunking.
    """
    name: str
    size: int
    last_modified: int
    mime_type: str = ""
    checksum: Optional[str] = None

    @classmethod
    def from_path(cls, path, checksum: Optional[str] = None) -> 'FileDescriptor':
        """
        Build a descriptor from a file on disk.

        Args:
            path: Path to a regular file
            checksum: Optional SHA-256 hex digest of the whole file

        Returns:
            FileDescriptor with size and modification time in milliseconds
        """
        stat = os.stat(path)
        mime_type, _ = mimetypes.guess_type(os.fspath(path))
        return cls(
            name=os.path.basename(path),
            size=stat.st_size,
            last_modified=int(stat.st_mtime * 1000),
            mime_type=mime_type or "",
            checksum=checksum,
        )

    def to_dict(self) -> dict:
        """Wire form sent in the fileData field."""
        data = {
            "name": self.name,
            "size": self.size,
            "lastModified": self.last_modified,
            "type": self.mime_type,
        }
        if self.checksum is not None:
            data["sha256Checksum"] = self.checksum
        return data


@dataclass(frozen=True)
class ChunkRange:
    """
    Half-open byte range [start_byte, end_byte) of a file.

    start_byte == end_byte only for the single range of an empty file.
    """
    start_byte: int
    end_byte: int

    def __post_init__(self):
        if self.start_byte < 0 or self.end_byte < self.start_byte:
            raise ValueError(f"Invalid chunk range [{self.start_byte}, {self.end_byte})")

    @property
    def length(self) -> int:
        return self.end_byte - self.start_byte


@dataclass(frozen=True)
class ChunkSequenceMetadata:
    """
    Position of a chunk among all chunks of one file (1-based).
    """
    sequence: int
    total_chunks: int

    def __post_init__(self):
        if not 1 <= self.sequence <= self.total_chunks:
            raise ValidationError(
                f"Chunk sequence {self.sequence} out of range 1..{self.total_chunks}"
            )

    @property
    def is_final(self) -> bool:
        return self.sequence == self.total_chunks


@dataclass(frozen=True)
class AdditionalFormData:
    """
    Caller-supplied metadata attached to every request of an upload.
    """
    field_name: str
    data: Any


@dataclass(frozen=True)
class ProgressEvent:
    """Overall progress of one file, 0-100."""
    progress: int
    file_index: Optional[int] = None


@dataclass(frozen=True)
class UploadResponse:
    """
    Server answer to the terminal request of one file.
    """
    status: int
    response: Any
    response_headers: dict = field(default_factory=dict)
    file_index: Optional[int] = None
