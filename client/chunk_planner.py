"""Splits a file size into ordered, contiguous byte ranges."""

from common.constants import ONE_KB
from common.exceptions import ConfigError
from common.types import ChunkRange


def check_chunk_size(chunk_size) -> None:
    """
    Check that a chunk size is a positive multiple of 1024 bytes.

    Raises:
        ConfigError: If the value is not a positive integer multiple of 1 KiB
    """
    if (
        isinstance(chunk_size, bool)
        or not isinstance(chunk_size, int)
        or chunk_size <= 0
        or chunk_size % ONE_KB != 0
    ):
        raise ConfigError(
            f"The size of a chunk must be a positive multiple of {ONE_KB} bytes, got {chunk_size!r}"
        )


def plan_chunks(file_size: int, chunk_size: int) -> list[ChunkRange]:
    """
    Compute the byte ranges a file is uploaded in.

    An empty file still produces one empty range so it travels through
    the protocol as a single chunk.

    Args:
        file_size: Size of the file in bytes
        chunk_size: Maximum bytes per chunk (positive multiple of 1024)

    Returns:
        Ranges covering exactly [0, file_size), in order

    Raises:
        ConfigError: If chunk_size is invalid
        ValueError: If file_size is negative
    """
    check_chunk_size(chunk_size)
    if file_size < 0:
        raise ValueError(f"File size must be non-negative, got {file_size}")

    total_chunks = max(-(-file_size // chunk_size), 1)
    return [
        ChunkRange(
            start_byte=offset * chunk_size,
            end_byte=min(file_size, (offset + 1) * chunk_size),
        )
        for offset in range(total_chunks)
    ]
