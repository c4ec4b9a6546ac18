"""Configuration settings for the upload server."""

import os
import tempfile


STORAGE_ROOT = os.environ.get("UPLOAD_STORAGE_ROOT", tempfile.gettempdir())

SERVER_HOST = os.environ.get("UPLOAD_SERVER_HOST", "0.0.0.0")

SERVER_PORT = int(os.environ.get("UPLOAD_SERVER_PORT", "8000"))
