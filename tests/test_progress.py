"""Tests for progress aggregation."""

from client.progress import (
    ProgressAggregator,
    calculate_progress,
    local_percent,
    round_half_up,
)
from common.types import ChunkSequenceMetadata, ProgressEvent


def test_round_half_up():
    """Test that halves round up rather than to even."""
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(2.4999) == 2
    assert round_half_up(99.5) == 100


def test_local_percent():
    """Test percent of one request body."""
    assert local_percent(0, 200) == 0
    assert local_percent(50, 200) == 25
    assert local_percent(200, 200) == 100


def test_local_percent_empty_body():
    """Test that an empty request body counts as fully sent."""
    assert local_percent(0, 0) == 100


def test_calculate_progress_unchunked():
    """Test that an unchunked request reports its local percent."""
    assert calculate_progress(42) == 42


def test_calculate_progress_weighted_by_chunk():
    """Test weighting of local percent by chunk position."""
    assert calculate_progress(60, ChunkSequenceMetadata(3, 5)) == 52
    assert calculate_progress(60, ChunkSequenceMetadata(2, 3)) == 53
    assert calculate_progress(100, ChunkSequenceMetadata(2, 4)) == 50
    assert calculate_progress(0, ChunkSequenceMetadata(1, 4)) == 0
    assert calculate_progress(100, ChunkSequenceMetadata(4, 4)) == 100


def test_emits_only_on_change():
    """Test that repeated percents are deduplicated."""
    events = []
    aggregator = ProgressAggregator(1)
    aggregator.subscribe(events.append)

    aggregator.begin_request(0)
    aggregator.update(0, 10, 100)
    aggregator.update(0, 10, 100)
    aggregator.update(0, 11, 100)
    aggregator.update(0, 100, 100)
    aggregator.update(0, 100, 100)

    assert [e.progress for e in events] == [10, 11, 100]
    assert all(e.file_index is None for e in events)


def test_update_returns_event():
    """Test that update returns the emitted event or None."""
    aggregator = ProgressAggregator(1)
    aggregator.begin_request(0)

    assert aggregator.update(0, 1, 2) == ProgressEvent(progress=50)
    assert aggregator.update(0, 1, 2) is None


def test_update_unknown_file_ignored():
    """Test that ticks for a file without a request in flight are ignored."""
    aggregator = ProgressAggregator(1)

    assert aggregator.update(0, 5, 10) is None


def test_file_index_attached_for_batches():
    """Test that events carry file_index only when the batch has several files."""
    events = []
    aggregator = ProgressAggregator(2)
    aggregator.subscribe(events.append)

    aggregator.begin_request(1)
    aggregator.update(1, 5, 10)

    assert events == [ProgressEvent(progress=50, file_index=1)]


def test_chunked_progress_is_monotonic():
    """Test overall progress across the chunks of one file."""
    events = []
    aggregator = ProgressAggregator(1)
    aggregator.subscribe(events.append)

    for sequence in range(1, 5):
        aggregator.begin_request(0, ChunkSequenceMetadata(sequence, 4))
        for sent in (0, 512, 1024):
            aggregator.update(0, sent, 1024)
        aggregator.complete_request(0)

    percents = [e.progress for e in events]
    assert percents == sorted(percents)
    assert percents[-1] == 100
    assert 50 in percents


def test_completion_after_terminal_requests_only():
    """Test that completion fires once, after the last file's terminal request."""
    completed = []
    aggregator = ProgressAggregator(2)
    aggregator.subscribe(on_complete=lambda: completed.append(True))

    aggregator.begin_request(0, ChunkSequenceMetadata(1, 2))
    assert aggregator.complete_request(0) is False
    aggregator.begin_request(0, ChunkSequenceMetadata(2, 2))
    assert aggregator.complete_request(0) is True
    assert completed == []
    assert aggregator.remaining_files == 1

    aggregator.begin_request(1)
    assert aggregator.complete_request(1) is True

    assert completed == [True]
    assert aggregator.completed is True
    assert aggregator.remaining_files == 0


def test_complete_request_without_state():
    """Test that completing an unknown request does nothing."""
    aggregator = ProgressAggregator(1)

    assert aggregator.complete_request(3) is False
    assert aggregator.remaining_files == 1
