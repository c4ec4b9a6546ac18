"""Configuration for the chunked uploader (allow-listed transport and protocol options)."""

import json
import math
import os
import shutil
from pathlib import Path
from typing import Optional

from client.chunk_planner import check_chunk_size
from common.constants import (
    DEFAULT_CHUNK_SIZE_BYTES,
    PROTOCOL_OPTIONS,
    RESPONSE_TYPES,
    TRANSPORT_OPTIONS,
    UPLOAD_ENDPOINT,
)
from common.exceptions import ConfigError
from common.logging_config import get_logger

logger = get_logger(__name__)

ALLOWED_OPTIONS = TRANSPORT_OPTIONS + PROTOCOL_OPTIONS


class UploadConfig:
    """Validated uploader options, optionally persisted as a JSON file."""

    DEFAULT_CONFIG = {
        "url": f"http://localhost:8000{UPLOAD_ENDPOINT}",
        "headers": {},
        "timeout": 30,
        "user": None,
        "password": None,
        "cross_domain": False,
        "with_credentials": False,
        "xsrf_cookie_name": None,
        "xsrf_header_name": None,
        "response_type": "json",
        "query_params": {},
        "chunk_size": DEFAULT_CHUNK_SIZE_BYTES,
        "add_checksum": False,
        "use_chunks": False,
    }

    def __init__(self, options: Optional[dict] = None, config_path: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            options: Option overrides; only allow-listed keys are accepted
            config_path: JSON file used by save(), None for in-memory configs

        Raises:
            ConfigError: If a key is not allowed or a value is invalid
        """
        self.config_path = config_path
        self.data = self.DEFAULT_CONFIG.copy()
        self.data["url"] = os.environ.get("UPLOAD_SERVER_URL", self.data["url"])
        self.data["headers"] = {}
        self.data["query_params"] = {}
        for key, value in (options or {}).items():
            self._check_option(key, value)
            self.data[key] = value

    @classmethod
    def load(cls, config_path: Path) -> 'UploadConfig':
        """
        Load configuration from a JSON file, creating it with defaults if missing.

        A corrupted file is copied to '<name>.json.bak' and defaults are used.

        Args:
            config_path: Path to config JSON file (typically ~/.chunk-uploader/config.json)

        Returns:
            UploadConfig bound to config_path

        Raises:
            ConfigError: If the file contains unknown keys or invalid values
        """
        config_path.parent.mkdir(parents=True, exist_ok=True)

        if not config_path.exists():
            config = cls(config_path=config_path)
            config.save()
            return config

        try:
            with open(config_path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Config file {config_path} is unreadable ({e}), using defaults")
            shutil.copy(config_path, config_path.with_suffix('.json.bak'))
            return cls(config_path=config_path)

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must contain a JSON object")
        return cls(data, config_path=config_path)

    def save(self) -> None:
        """Save current configuration to its file, if it has one."""
        if self.config_path is None:
            return
        with open(self.config_path, 'w') as f:
            json.dump(self.data, f, indent=2)

    def set(self, key: str, value) -> None:
        """
        Validate, update and persist one option.

        Raises:
            ConfigError: If the key is not allowed or the value is invalid
        """
        self._check_option(key, value)
        self.data[key] = value
        self.save()

    def _check_option(self, key: str, value) -> None:
        if key not in ALLOWED_OPTIONS:
            raise ConfigError(f'"{key}" isn\'t a valid upload configuration option')

        if key == "chunk_size":
            check_chunk_size(value)
        elif key in ("add_checksum", "use_chunks", "cross_domain", "with_credentials"):
            if not isinstance(value, bool):
                raise ConfigError(f'"{key}" must be a boolean')
        elif key in ("headers", "query_params"):
            if not isinstance(value, dict):
                raise ConfigError(f'"{key}" must be a mapping')
        elif key == "timeout":
            if value is not None and (
                isinstance(value, bool)
                or not isinstance(value, (int, float))
                or not math.isfinite(value)
                or value < 0
            ):
                raise ConfigError('"timeout" must be a non-negative number of seconds or null')
        elif key == "response_type":
            if value not in RESPONSE_TYPES:
                raise ConfigError(f'"response_type" must be one of {", ".join(RESPONSE_TYPES)}')
        elif key == "url":
            if not isinstance(value, str) or not value:
                raise ConfigError('"url" must be a non-empty string')
        elif value is not None and not isinstance(value, str):
            raise ConfigError(f'"{key}" must be a string')

    @property
    def url(self) -> str:
        return self.data["url"]

    @property
    def chunk_size(self) -> int:
        return self.data["chunk_size"]

    @property
    def add_checksum(self) -> bool:
        return self.data["add_checksum"]

    @property
    def use_chunks(self) -> bool:
        return self.data["use_chunks"]

    def get_timeout(self) -> Optional[float]:
        """
        Get request timeout in seconds.

        Returns:
            Timeout in seconds, None when disabled (null or 0)
        """
        timeout = self.data["timeout"]
        return timeout or None

    def get_headers(self) -> dict:
        """
        Get request headers without any Content-Type.

        The multipart boundary is generated per request by httpx.
        """
        return {
            name: value
            for name, value in self.data["headers"].items()
            if name.lower() != "content-type"
        }

    def get_auth(self) -> Optional[tuple[str, str]]:
        """
        Get basic auth credentials.

        Returns:
            (user, password) tuple, or None if no user is configured
        """
        if not self.data["user"]:
            return None
        return self.data["user"], self.data["password"] or ""

    def masked(self) -> dict:
        """Copy of the options with the password hidden, for display."""
        data = dict(self.data)
        if data.get("password"):
            data["password"] = "***"
        return data
