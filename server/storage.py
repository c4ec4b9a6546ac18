"""Reassembles uploaded chunks into destination files on disk."""

import enum
from pathlib import Path
from typing import Optional

from common.exceptions import ChunkWriteError, ValidationError
from common.logging_config import get_logger
from common.protocol import ChunkData

logger = get_logger(__name__)


class WriteStrategy(enum.Enum):
    """How one request's bytes are written to the destination file."""
    OVERWRITE = "overwrite"
    RESET_THEN_APPEND = "reset-then-append"
    APPEND = "append"


def choose_write_strategy(chunk: Optional[ChunkData]) -> WriteStrategy:
    """
    Pick the write strategy from a request's chunk metadata.

    Args:
        chunk: Parsed chunkData, None for an unchunked upload

    Returns:
        OVERWRITE without chunk metadata, RESET_THEN_APPEND for the first
        chunk of a sequence, APPEND for every later chunk
    """
    if chunk is None:
        return WriteStrategy.OVERWRITE
    if chunk.sequence == 1:
        return WriteStrategy.RESET_THEN_APPEND
    return WriteStrategy.APPEND


class ChunkReceiver:
    """
    Writes incoming chunks to <storage_root>/<file_name>.

    Chunks of one file must arrive in increasing sequence order without gaps
    or duplicates; the receiver appends them as they come.
    """

    def __init__(self, storage_root):
        self.storage_root = Path(storage_root)

    def ensure_storage_root(self) -> None:
        """Ensure storage directory exists."""
        self.storage_root.mkdir(parents=True, exist_ok=True)

    def get_destination_path(self, file_name: str) -> Path:
        """
        Resolve the destination of a file name inside the storage root.

        Raises:
            ValidationError: If the name is empty, absolute or escapes the root
        """
        if not file_name or not file_name.strip():
            raise ValidationError("File name is empty")
        if Path(file_name).is_absolute():
            raise ValidationError(f"Absolute file name not allowed: {file_name}")

        root = self.storage_root.resolve()
        destination = (root / file_name).resolve()
        try:
            destination.relative_to(root)
        except ValueError:
            raise ValidationError(f"File name escapes the storage root: {file_name}")
        if destination == root:
            raise ValidationError(f"Invalid file name: {file_name}")
        return destination

    def receive(self, file_name: str, data: bytes, chunk: Optional[ChunkData] = None) -> Path:
        """
        Write one request's bytes to the destination file.

        Args:
            file_name: Name of the destination file relative to the storage root
            data: Whole chunk (or whole file) content
            chunk: Parsed chunk metadata, None for unchunked uploads

        Returns:
            Path of the destination file

        Raises:
            ValidationError: If file_name is unsafe
            ChunkWriteError: If the file system operation fails
        """
        destination = self.get_destination_path(file_name)
        strategy = choose_write_strategy(chunk)

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if strategy is WriteStrategy.OVERWRITE:
                destination.write_bytes(data)
            else:
                if strategy is WriteStrategy.RESET_THEN_APPEND:
                    destination.unlink(missing_ok=True)
                with open(destination, 'ab') as f:
                    f.write(data)
        except OSError as e:
            logger.error(f"Failed to write {destination} ({strategy.value}): {e}")
            raise ChunkWriteError(f"Failed to write {file_name}: {e}") from e

        if chunk is None:
            logger.info(f"Wrote {len(data)} bytes to {destination}")
        else:
            logger.debug(
                f"Wrote chunk {chunk.sequence}/{chunk.total_chunks} "
                f"({len(data)} bytes, {strategy.value}) to {destination}"
            )
            if chunk.is_final:
                logger.info(f"Reassembled {destination} from {chunk.total_chunks} chunk(s)")
        return destination
