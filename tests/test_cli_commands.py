"""Tests for CLI command handlers."""

import io
import json
from unittest.mock import Mock

from cli import commands
from cli.commands import (
    format_upload_error,
    handle_set_config,
    handle_show_config,
    handle_upload,
)
from cli.models import SetConfigCommand, ShowConfigCommand, UploadCommand
from cli.parser import parse_command
from cli.repl import dispatch_command
from cli.utils import ProgressPrinter, format_file_size, render_bar
from client.uploader import FileUploader
from common.exceptions import UploadError, ValidationError
from common.types import ProgressEvent

URL = 'http://uploads.test/api/upload'


def test_handle_upload(recording_server, sample_file, capsys):
    """Test upload command handler against a mock server."""
    uploader = FileUploader({'url': URL}, recording_server.client())

    result = handle_upload(UploadCommand(file_list=(str(sample_file),)), uploader=uploader)

    assert 'Uploaded: sample.bin (10 B) -> /srv/sample.bin' in result
    assert 'Uploading sample.bin' in capsys.readouterr().out


def test_handle_upload_with_meta(recording_server, sample_file):
    """Test that --meta JSON values are sent decoded."""
    uploader = FileUploader({'url': URL}, recording_server.client())
    cmd = UploadCommand(file_list=(str(sample_file),), meta_field='album', meta_value='{"id": 3}')

    handle_upload(cmd, uploader=uploader)

    assert recording_server.requests[0]['fields']['album'] == {'id': 3}


def test_handle_upload_reports_skipped(recording_server, sample_file, tmp_path):
    """Test that entries which are not files are reported."""
    uploader = FileUploader({'url': URL}, recording_server.client())
    cmd = UploadCommand(file_list=(str(tmp_path / 'missing.txt'), str(sample_file)))

    result = handle_upload(cmd, uploader=uploader)

    assert 'Skipped 1 entry(ies)' in result
    assert 'Uploaded: sample.bin' in result


def test_handle_upload_no_files(tmp_path):
    """Test upload command handler when no file exists."""
    uploader = Mock(spec=FileUploader)
    uploader.upload.side_effect = ValidationError('no files supplied')

    cmd = UploadCommand(file_list=(str(tmp_path / 'missing.txt'),))
    result = handle_upload(cmd, uploader=uploader)

    assert result == 'Error: no files supplied'
    uploader.upload.assert_called_once_with([str(tmp_path / 'missing.txt')], None)


def test_handle_upload_server_error(recording_server, sample_file):
    """Test that a failed request is reported with the server's code."""
    recording_server.fail_on = lambda entry: True
    uploader = FileUploader({'url': URL}, recording_server.client())

    result = handle_upload(UploadCommand(file_list=(str(sample_file),)), uploader=uploader)

    assert 'Error: The server could not write the file: disk full (Code: WRITE_FAILED)' in result


def test_format_upload_error_network():
    """Test message for an unreachable server."""
    assert 'Cannot reach the upload server' in format_upload_error(UploadError(0))


def test_format_upload_error_status_only():
    """Test message for a status without a structured body."""
    assert format_upload_error(UploadError(413, 'too big')) == (
        'Chunk too large for the server, try a smaller chunk_size'
    )
    assert format_upload_error(UploadError(418)) == 'Upload failed with status 418'


def test_handle_show_config(temp_config):
    """Test that the configuration is shown with the password masked."""
    temp_config.set('user', 'alice')
    temp_config.set('password', 's3cret')

    result = json.loads(handle_show_config(ShowConfigCommand(), config=temp_config))

    assert result['user'] == 'alice'
    assert result['password'] == '***'


def test_handle_set_config(temp_config):
    """Test that set updates and persists the option."""
    result = handle_set_config(SetConfigCommand(key='chunk_size', value=4096), config=temp_config)

    assert result == 'Set chunk_size = 4096'
    assert json.loads(temp_config.config_path.read_text())['chunk_size'] == 4096


def test_handle_set_config_masks_password(temp_config):
    """Test that the password is not echoed."""
    result = handle_set_config(SetConfigCommand(key='password', value='s3cret'), config=temp_config)

    assert result == 'Set password = ***'


def test_handle_set_config_invalid(temp_config):
    """Test that an invalid value is reported and not saved."""
    result = handle_set_config(SetConfigCommand(key='chunk_size', value=1000), config=temp_config)

    assert result.startswith('Error: ')
    assert temp_config.chunk_size == 1024 * 1024


def test_handle_set_config_resets_uploader(temp_config):
    """Test that changing an option drops the cached uploader."""
    cached = Mock(spec=FileUploader)
    commands._uploader = cached

    handle_set_config(SetConfigCommand(key='use_chunks', value=True), config=temp_config)

    cached.close.assert_called_once()
    assert commands._uploader is None


def test_progress_printer():
    """Test progress line rendering per file."""
    stream = io.StringIO()
    printer = ProgressPrinter(['a.bin', 'b.bin'], stream=stream)

    printer(ProgressEvent(progress=50, file_index=0))
    printer(ProgressEvent(progress=100, file_index=0))
    printer(ProgressEvent(progress=100, file_index=1))
    printer.finish()

    output = stream.getvalue()
    assert output.count('\n') == 2
    assert 'Uploading a.bin' in output
    assert 'Uploading b.bin' in output


def test_render_bar():
    """Test progress bar rendering."""
    assert render_bar(0, width=10) == '[----------]'
    assert render_bar(50, width=10) == '[#####-----]'
    assert render_bar(100, width=10) == '[##########]'


def test_format_file_size():
    """Test human-readable sizes."""
    assert format_file_size(512) == '512 B'
    assert format_file_size(1536) == '1.50 KiB'
    assert format_file_size(5 * 1024 * 1024) == '5.00 MiB'


def test_dispatch_command(temp_config, monkeypatch):
    """Test that parsed commands reach their handlers."""
    monkeypatch.setattr(commands, '_config', temp_config)

    result = dispatch_command(parse_command('set use_chunks true'))

    assert result == 'Set use_chunks = true'
    assert json.loads(dispatch_command(parse_command('config')))['use_chunks'] is True


def test_handle_set_config_rejects_non_finite_timeout(temp_config):
    """Test that 'set timeout nan' is refused and not saved."""
    result = handle_set_config(parse_command('set timeout nan'), config=temp_config)

    assert result.startswith('Error: ')
    assert temp_config.get_timeout() == 30
    assert json.loads(temp_config.config_path.read_text())['timeout'] == 30
