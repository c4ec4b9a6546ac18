"""Command handler functions for CLI operations."""

import json
import os
from pathlib import Path
from typing import Optional

from cli.models import SetConfigCommand, ShowConfigCommand, UploadCommand
from cli.utils import ProgressPrinter, format_file_size
from client.config import UploadConfig
from client.uploader import FileUploader
from common.exceptions import ConfigError, UploadError, UploadException
from common.logging_config import get_logger
from common.protocol import deserialize
from common.types import AdditionalFormData

logger = get_logger(__name__)

CONFIG_PATH = Path.home() / '.chunk-uploader' / 'config.json'

_config: Optional[UploadConfig] = None
_uploader: Optional[FileUploader] = None


def get_config() -> UploadConfig:
    """
    Get or load the global UploadConfig instance.

    Returns:
        UploadConfig bound to ~/.chunk-uploader/config.json
    """
    global _config
    if _config is None:
        logger.debug(f"Loading configuration from {CONFIG_PATH}")
        _config = UploadConfig.load(CONFIG_PATH)
    return _config


def get_uploader() -> FileUploader:
    """
    Get or create global FileUploader instance.

    Returns:
        FileUploader instance
    """
    global _uploader
    if _uploader is None:
        logger.debug("Creating new FileUploader instance")
        _uploader = FileUploader(get_config())
    return _uploader


def reset_uploader() -> None:
    """Drop the global uploader so the next command picks up new configuration."""
    global _uploader
    if _uploader is not None:
        _uploader.close()
        _uploader = None


def format_upload_error(error: UploadError) -> str:
    """
    Map an UploadError to a user-friendly message.

    Args:
        error: Failed upload

    Returns:
        User-friendly error message
    """
    if error.status == 0:
        return "Cannot reach the upload server. Is it running?"

    body = error.response if isinstance(error.response, dict) else {}
    code = body.get('code', 'UNKNOWN')
    detail = body.get('detail')

    error_messages = {
        'INVALID_UPLOAD': 'The server rejected the upload',
        'WRITE_FAILED': 'The server could not write the file',
    }
    status_messages = {
        400: 'Bad request',
        401: 'Not authenticated',
        403: 'Access forbidden',
        404: 'Upload URL not found',
        413: 'Chunk too large for the server, try a smaller chunk_size',
        422: 'Malformed upload request',
        500: 'Server error',
        503: 'Service unavailable',
    }

    message = error_messages.get(code) or status_messages.get(error.status, f"Upload failed with status {error.status}")
    if detail and isinstance(detail, str):
        message = f"{message}: {detail}"
    return f"{message} (Code: {code})" if code != 'UNKNOWN' else message


def _build_additional_form_data(cmd: UploadCommand) -> Optional[AdditionalFormData]:
    if cmd.meta_field is None:
        return None
    value = deserialize(cmd.meta_value)
    if not isinstance(value, (dict, list)):
        value = cmd.meta_value
    return AdditionalFormData(field_name=cmd.meta_field, data=value)


def handle_upload(cmd: UploadCommand, uploader: Optional[FileUploader] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with file_list and optional metadata
        uploader: Optional FileUploader for dependency injection (testing)

    Returns:
        Success or error message with one line per file
    """
    logger.info(f"Executing upload command: {len(cmd.file_list)} file(s)")
    if uploader is None:
        uploader = get_uploader()

    try:
        session = uploader.upload(list(cmd.file_list), _build_additional_form_data(cmd))
    except UploadException as e:
        return f"Error: {e}"

    names = [os.path.basename(path) for path in session.paths]
    sizes = [os.path.getsize(path) for path in session.paths]
    printer = ProgressPrinter(names)
    session.subscribe(printer)

    results = []
    skipped = len(cmd.file_list) - len(session.paths)
    if skipped:
        results.append(f"Skipped {skipped} entry(ies) that are not files")

    try:
        for position, response in enumerate(session):
            index = response.file_index if response.file_index is not None else position
            body = response.response if isinstance(response.response, dict) else {}
            destination = body.get('filePath', '?')
            results.append(
                f"Uploaded: {names[index]} ({format_file_size(sizes[index])}) -> {destination}"
            )
    except UploadError as e:
        logger.warning(f"Upload command failed: status={e.status}")
        results.append(f"Error: {format_upload_error(e)}")
    except (UploadException, OSError) as e:
        logger.error(f"Upload command failed: {e}", exc_info=True)
        results.append(f"Error: {e}")
    finally:
        printer.finish()

    logger.debug("Upload command completed")
    return "\n".join(results)


def handle_show_config(cmd: ShowConfigCommand, config: Optional[UploadConfig] = None) -> str:
    """
    Handle 'config' command.

    Returns:
        Current configuration as indented JSON, password masked
    """
    if config is None:
        config = get_config()
    return json.dumps(config.masked(), indent=2)


def handle_set_config(cmd: SetConfigCommand, config: Optional[UploadConfig] = None) -> str:
    """
    Handle 'set' command.

    Args:
        cmd: SetConfigCommand with key and typed value
        config: Optional UploadConfig for dependency injection (testing)

    Returns:
        Success or error message
    """
    if config is None:
        config = get_config()
    try:
        config.set(cmd.key, cmd.value)
    except ConfigError as e:
        return f"Error: {e}"
    reset_uploader()
    logger.info(f"Configuration updated: {cmd.key}")
    shown = "***" if cmd.key == "password" and cmd.value else json.dumps(cmd.value)
    return f"Set {cmd.key} = {shown}"
