"""Command parser for CLI input."""

import json
import shlex
from typing import Any

from cli.constants import CONFIG_KEYS
from cli.models import (
    CommandRequest,
    SetConfigCommand,
    ShowConfigCommand,
    UploadCommand,
)

BOOLEAN_KEYS = ("add_checksum", "use_chunks", "cross_domain", "with_credentials")
MAPPING_KEYS = ("headers", "query_params")
NULL_WORDS = ("none", "null")


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of Upload/ShowConfig/SetConfig)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "upload":
        return _parse_upload(tokens[1:])
    elif command_name == "config":
        return _parse_config(tokens[1:])
    elif command_name == "set":
        return _parse_set(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload file-list [--meta field=value]' command."""
    file_list = []
    meta_field = None
    meta_value = None

    index = 0
    while index < len(args):
        arg = args[index]
        if arg == "--meta":
            if meta_field is not None:
                raise ParseError("upload accepts a single --meta option")
            if index + 1 >= len(args):
                raise ParseError("--meta requires field=value")
            meta_field, separator, meta_value = args[index + 1].partition("=")
            if not separator or not meta_field:
                raise ParseError("--meta requires field=value")
            index += 2
            continue
        file_list.append(arg)
        index += 1

    if not file_list:
        raise ParseError("upload requires at least one file")

    return UploadCommand(
        file_list=tuple(file_list),
        meta_field=meta_field,
        meta_value=meta_value,
    )


def _parse_config(args: list[str]) -> ShowConfigCommand:
    """Parse 'config' command."""
    if args:
        raise ParseError("config takes no arguments")
    return ShowConfigCommand()


def _parse_set(args: list[str]) -> SetConfigCommand:
    """Parse 'set <key> <value>' command."""
    if len(args) != 2:
        raise ParseError("set requires exactly 2 arguments: <key> <value>")

    key, raw_value = args
    if key not in CONFIG_KEYS:
        raise ParseError(f"Unknown configuration key: {key}")

    return SetConfigCommand(key=key, value=_convert_value(key, raw_value))


def _convert_value(key: str, raw_value: str) -> Any:
    """Convert a typed-in value to the type expected by the option."""
    lowered = raw_value.lower()

    if key == "chunk_size":
        try:
            return int(raw_value)
        except ValueError:
            raise ParseError(f"{key} must be an integer number of bytes")

    if key in BOOLEAN_KEYS:
        if lowered in ("true", "yes", "on", "1"):
            return True
        if lowered in ("false", "no", "off", "0"):
            return False
        raise ParseError(f"{key} must be true or false")

    if key == "timeout":
        if lowered in NULL_WORDS:
            return None
        try:
            return float(raw_value)
        except ValueError:
            raise ParseError(f"{key} must be a number of seconds or none")

    if key in MAPPING_KEYS:
        try:
            value = json.loads(raw_value)
        except ValueError:
            raise ParseError(f"{key} must be a JSON object")
        if not isinstance(value, dict):
            raise ParseError(f"{key} must be a JSON object")
        return value

    if lowered in NULL_WORDS:
        return None
    return raw_value
