"""Tests for UploadCompleter."""

import pytest
from pathlib import Path
from unittest.mock import patch

from prompt_toolkit.document import Document

from cli.completer import UploadCompleter
from cli.constants import COMMANDS, CONFIG_KEYS


@pytest.fixture
def completer():
    """Create an UploadCompleter instance."""
    return UploadCompleter()


@pytest.fixture
def work_dir(tmp_path):
    """
    Create a working directory with files and a subdirectory.

    Returns:
        Path to the working directory
    """
    (tmp_path / "report.pdf").write_text("content")
    (tmp_path / "photo.jpg").write_text("content")
    photos = tmp_path / "photos"
    photos.mkdir()
    (photos / "beach.jpg").write_text("content")
    return tmp_path


def get_completions_list(completer, text):
    """Helper to get list of completion texts from completer."""
    doc = Document(text, len(text))
    return [c.text for c in completer.get_completions(doc, None)]


class TestCommandCompletion:
    """Tests for command name completion."""

    def test_empty_input_shows_all_commands(self, completer):
        """Empty input should suggest all commands."""
        completions = get_completions_list(completer, "")
        assert completions == COMMANDS

    def test_partial_command_filters(self, completer):
        """Partial command should filter to matching commands."""
        completions = get_completions_list(completer, "c")
        assert completions == ["config", "clear"]

    def test_command_completion_case_insensitive(self, completer):
        """Command completion should be case insensitive."""
        assert get_completions_list(completer, "UP") == ["upload"]


class TestFileCompletion:
    """Tests for file path completion in the upload command."""

    def test_upload_lists_working_directory(self, completer, work_dir):
        """After 'upload ', should show entries of the working directory."""
        with patch.object(Path, "cwd", return_value=work_dir):
            completions = get_completions_list(completer, "upload ")
        assert completions == ["photo.jpg", "photos/", "report.pdf"]

    def test_upload_filters_by_prefix(self, completer, work_dir):
        """Partial names should filter entries."""
        with patch.object(Path, "cwd", return_value=work_dir):
            completions = get_completions_list(completer, "upload rep")
        assert completions == ["report.pdf"]

    def test_upload_descends_into_directory(self, completer, work_dir):
        """A path with a directory part should list that directory."""
        with patch.object(Path, "cwd", return_value=work_dir):
            completions = get_completions_list(completer, "upload photos/")
        assert completions == ["photos/beach.jpg"]

    def test_upload_excludes_already_typed(self, completer, work_dir):
        """Files already on the line should not be offered again."""
        with patch.object(Path, "cwd", return_value=work_dir):
            completions = get_completions_list(completer, "upload report.pdf ")
        assert "report.pdf" not in completions
        assert "photo.jpg" in completions

    def test_no_completion_after_meta(self, completer, work_dir):
        """The --meta value is not a path."""
        with patch.object(Path, "cwd", return_value=work_dir):
            assert get_completions_list(completer, "upload report.pdf --meta ") == []

    def test_missing_directory(self, completer, work_dir):
        """Unknown directories yield no completions."""
        with patch.object(Path, "cwd", return_value=work_dir):
            assert get_completions_list(completer, "upload nowhere/x") == []


class TestConfigKeyCompletion:
    """Tests for option key completion in the set command."""

    def test_set_lists_keys(self, completer):
        """After 'set ', should show every option key."""
        assert get_completions_list(completer, "set ") == CONFIG_KEYS

    def test_set_filters_keys(self, completer):
        """Partial keys should filter options."""
        assert get_completions_list(completer, "set use") == ["user", "use_chunks"]

    def test_set_value_not_completed(self, completer):
        """No completion is offered for the value."""
        assert get_completions_list(completer, "set use_chunks ") == []

    def test_config_has_no_arguments(self, completer):
        """The config command takes no arguments."""
        assert get_completions_list(completer, "config ") == []
