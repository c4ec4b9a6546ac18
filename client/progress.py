"""Aggregates per-request byte progress into one 0-100 value per file."""

import math
from dataclasses import dataclass
from typing import Callable, Optional

from common.logging_config import get_logger
from common.types import ChunkSequenceMetadata, ProgressEvent

logger = get_logger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]
CompleteCallback = Callable[[], None]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up."""
    return math.floor(value + 0.5)


def local_percent(bytes_sent: int, bytes_total: int) -> int:
    """
    Percent of the current request body that has been sent.

    A request with an empty body counts as fully sent.
    """
    if bytes_total <= 0:
        return 100
    return round_half_up(bytes_sent * 100 / bytes_total)


def calculate_progress(progress: int, chunk: Optional[ChunkSequenceMetadata] = None) -> int:
    """
    Weight a request's local percent by the chunk's position in its file.

    Chunks are sent strictly in order, so every completed chunk contributes
    exactly 100 / total_chunks percent.

    Args:
        progress: Local percent of the current request (0-100)
        chunk: Sequence metadata, None for unchunked uploads

    Returns:
        Overall percent for the file
    """
    if chunk is None:
        return progress
    return round_half_up(
        progress / chunk.total_chunks + (chunk.sequence - 1) * (100 / chunk.total_chunks)
    )


@dataclass
class ProgressState:
    """Progress bookkeeping of the file currently being sent."""
    last_emitted_percent: Optional[int] = None
    sequence: Optional[int] = None
    total_chunks: Optional[int] = None

    @property
    def chunk(self) -> Optional[ChunkSequenceMetadata]:
        if self.sequence is None:
            return None
        return ChunkSequenceMetadata(self.sequence, self.total_chunks)


class ProgressAggregator:
    """
    Per-batch progress state.

    Emits a ProgressEvent only when a file's overall percent changes, and
    signals completion once every file of the batch has finished its
    terminal request.
    """

    def __init__(self, file_count: int):
        """
        Initialize aggregator for one batch.

        Args:
            file_count: Number of files in the batch, fixed at batch start
        """
        self.file_count = file_count
        self.remaining_files = file_count
        self.completed = False
        self._states: dict[int, ProgressState] = {}
        self._progress_callbacks: list[ProgressCallback] = []
        self._complete_callbacks: list[CompleteCallback] = []

    def subscribe(
        self,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ) -> None:
        """Register progress and completion callbacks."""
        if on_progress is not None:
            self._progress_callbacks.append(on_progress)
        if on_complete is not None:
            self._complete_callbacks.append(on_complete)

    def begin_request(self, file_index: int, chunk: Optional[ChunkSequenceMetadata] = None) -> None:
        """Create or advance the progress state of a file before a request is sent."""
        state = self._states.setdefault(file_index, ProgressState())
        if chunk is not None:
            state.sequence = chunk.sequence
            state.total_chunks = chunk.total_chunks

    def update(self, file_index: int, bytes_sent: int, bytes_total: int) -> Optional[ProgressEvent]:
        """
        Record a byte-progress tick of the current request.

        Returns:
            The emitted event, or None when the percent did not change
        """
        state = self._states.get(file_index)
        if state is None:
            return None

        percent = calculate_progress(local_percent(bytes_sent, bytes_total), state.chunk)
        if percent == state.last_emitted_percent:
            return None
        state.last_emitted_percent = percent

        event = ProgressEvent(
            progress=percent,
            file_index=file_index if self.file_count > 1 else None,
        )
        for callback in self._progress_callbacks:
            callback(event)
        return event

    def complete_request(self, file_index: int) -> bool:
        """
        Record that the current request of a file received its response.

        Returns:
            True if this was the file's terminal request
        """
        state = self._states.get(file_index)
        if state is None:
            return False

        chunk = state.chunk
        if chunk is not None and not chunk.is_final:
            return False

        del self._states[file_index]
        self.remaining_files -= 1
        logger.debug(f"File {file_index} finished, {self.remaining_files} file(s) remaining")

        if self.remaining_files == 0 and not self.completed:
            self.completed = True
            for callback in self._complete_callbacks:
                callback()
        return True
