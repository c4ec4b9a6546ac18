"""Shared pytest fixtures for all tests."""

import json
import re

import httpx
import pytest
from fastapi.testclient import TestClient

from client.config import UploadConfig
from server.main import app
from server.routes.upload_routes import get_chunk_receiver
from server.storage import ChunkReceiver


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .chunk-uploader directory
    """
    config_dir = tmp_path / '.chunk-uploader'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        UploadConfig instance with temp config file
    """
    return UploadConfig.load(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a 10-byte sample file for testing unchunked uploads.

    Returns:
        Path to sample file
    """
    file_path = tmp_path / 'sample.bin'
    file_path.write_bytes(b'0123456789')
    return file_path


@pytest.fixture
def make_file(tmp_path):
    """
    Factory creating files of a given size with deterministic content.

    Returns:
        Function (name, size) -> Path
    """
    def _make(name: str, size: int):
        file_path = tmp_path / 'source' / name
        file_path.parent.mkdir(exist_ok=True)
        file_path.write_bytes(bytes(i % 251 for i in range(size)))
        return file_path
    return _make


@pytest.fixture
def multiple_sample_files(make_file):
    """
    Create three files of different sizes for testing batch uploads.

    Returns:
        List of Paths to sample files
    """
    return [
        make_file('first.bin', 2500),
        make_file('second.bin', 1024),
        make_file('third.bin', 0),
    ]


@pytest.fixture
def storage_root(tmp_path):
    """Directory the receiving server writes into."""
    root = tmp_path / 'storage'
    root.mkdir()
    return root


@pytest.fixture
def api_client(storage_root):
    """
    TestClient for the upload server, writing into a temporary storage root.
    """
    app.dependency_overrides[get_chunk_receiver] = lambda: ChunkReceiver(storage_root)
    yield TestClient(app)
    app.dependency_overrides.clear()


def parse_multipart(request: httpx.Request) -> dict:
    """
    Split a multipart/form-data request body into {field name: raw bytes}.
    """
    boundary = request.headers['content-type'].split('boundary=')[1].encode()
    parts = {}
    for part in request.content.split(b'--' + boundary):
        if not part or part.startswith(b'--'):
            continue
        head, _, body = part.partition(b'\r\n\r\n')
        match = re.search(rb'name="([^"]+)"', head)
        if match is None:
            continue
        if body.endswith(b'\r\n'):
            body = body[:-2]
        parts[match.group(1).decode()] = body
    return parts


class RecordingServer:
    """
    MockTransport handler that records every request and answers 201.

    Each recorded entry holds the parsed form fields (JSON fields decoded),
    the file part bytes, and the raw httpx request.
    """

    def __init__(self):
        self.requests = []
        self.fail_on = None
        self.before_response = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        parts = parse_multipart(request)
        content = parts.pop('file', b'')
        fields = {}
        for name, value in parts.items():
            text = value.decode()
            try:
                fields[name] = json.loads(text)
            except ValueError:
                fields[name] = text
        entry = {'fields': fields, 'content': content, 'request': request}
        self.requests.append(entry)

        if self.before_response is not None:
            self.before_response(entry)
        if self.fail_on is not None and self.fail_on(entry):
            return httpx.Response(500, json={'detail': 'disk full', 'code': 'WRITE_FAILED'})

        return httpx.Response(201, json={'filePath': f"/srv/{fields['fileData']['name']}", **fields})

    def client(self, **kwargs) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self), **kwargs)


@pytest.fixture
def recording_server():
    """Recording mock upload server."""
    return RecordingServer()


@pytest.fixture
def multipart_parser():
    """Expose the multipart body parser to tests."""
    return parse_multipart
