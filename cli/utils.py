"""Utility functions for CLI operations."""

import sys

from cli.constants import GREEN, RESET
from common.types import ProgressEvent


class ProgressPrinter:
    """Progress subscriber that redraws one status line per file on stdout."""

    def __init__(self, file_names: list[str], stream=None):
        """
        Initialize the progress printer.

        Args:
            file_names: Display names of the batch, in upload order
            stream: Output stream (defaults to sys.stdout)
        """
        self.file_names = file_names
        self.stream = stream or sys.stdout
        self._current_index = None

    def __call__(self, event: ProgressEvent) -> None:
        """Display a progress event."""
        index = event.file_index or 0
        if self._current_index is not None and index != self._current_index:
            self.stream.write('\n')
        self._current_index = index

        name = self.file_names[index] if index < len(self.file_names) else f"file {index}"
        self.stream.write(
            f"\rUploading {name}: {render_bar(event.progress)} ({GREEN}{event.progress}%{RESET})"
        )
        self.stream.flush()

    def finish(self) -> None:
        """Finalize progress display with newline."""
        if self._current_index is not None:
            self.stream.write('\n')
            self.stream.flush()
            self._current_index = None


def render_bar(progress: int, width: int = 30) -> str:
    """Render a textual progress bar for a 0-100 value."""
    filled = progress * width // 100
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"
