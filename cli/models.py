"""Command data types for CLI."""

from dataclasses import dataclass
from typing import Any, Literal, Optional


@dataclass(frozen=True)
class UploadCommand:
    """Upload files, optionally with one metadata field."""

    file_list: tuple[str, ...]
    meta_field: Optional[str] = None
    meta_value: Optional[str] = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class ShowConfigCommand:
    """Show the current configuration."""

    command: Literal["config"] = "config"


@dataclass(frozen=True)
class SetConfigCommand:
    """Set one configuration option."""

    key: str
    value: Any
    command: Literal["set"] = "set"


CommandRequest = (
    UploadCommand
    | ShowConfigCommand
    | SetConfigCommand
)
