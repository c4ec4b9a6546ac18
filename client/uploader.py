"""Sequential chunked uploader: one request in flight, one file at a time."""

import os
from typing import Iterator, Optional, Union

import httpx

from client.chunk_planner import plan_chunks
from client.config import UploadConfig
from client.progress import CompleteCallback, ProgressAggregator, ProgressCallback
from client.transport import UploadTransport
from common.checksum import compute_file_checksum
from common.constants import RESERVED_FIELDS
from common.exceptions import ValidationError
from common.logging_config import get_logger
from common.protocol import ChunkData, build_form_fields
from common.types import (
    AdditionalFormData,
    ChunkRange,
    ChunkSequenceMetadata,
    FileDescriptor,
    UploadResponse,
)

logger = get_logger(__name__)

PathLike = Union[str, os.PathLike]


def read_range(path: PathLike, chunk_range: ChunkRange) -> bytes:
    """Read the bytes of one chunk range from a file."""
    with open(path, 'rb') as f:
        f.seek(chunk_range.start_byte)
        return f.read(chunk_range.length)


class UploadSession:
    """
    One batch of files handed to FileUploader.upload().

    Iterating the session sends the files and yields one UploadResponse per
    completed file. Progress is published to subscribers as a side channel.
    Closing the iterator early stops any further request from being issued.
    """

    def __init__(
        self,
        uploader: 'FileUploader',
        paths: list[PathLike],
        additional_form_data: Optional[AdditionalFormData] = None,
    ):
        self.uploader = uploader
        self.paths = paths
        self.file_count = len(paths)
        self.additional_form_data = additional_form_data
        self.progress = ProgressAggregator(self.file_count)
        self._iterator: Optional[Iterator[UploadResponse]] = None

    def subscribe(
        self,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ) -> 'UploadSession':
        """Register progress/completion callbacks; returns the session for chaining."""
        self.progress.subscribe(on_progress, on_complete)
        return self

    def __iter__(self) -> Iterator[UploadResponse]:
        if self._iterator is None:
            self._iterator = self._run()
        return self._iterator

    def run(self) -> list[UploadResponse]:
        """Upload every file and return the responses in batch order."""
        return list(self)

    def close(self) -> None:
        """Stop the batch; files not yet started are never sent."""
        if self._iterator is not None:
            self._iterator.close()

    def _run(self) -> Iterator[UploadResponse]:
        logger.info(f"Starting upload of {self.file_count} file(s)")
        for file_index, path in enumerate(self.paths):
            yield self.uploader.upload_file(
                path,
                file_index,
                self.progress,
                self.additional_form_data,
            )
        logger.info(f"Upload of {self.file_count} file(s) complete")


class FileUploader:
    """
    Uploads files to the configured URL, whole or split into chunks.

    Usage:
        uploader = FileUploader({"url": "http://host/api/upload", "use_chunks": True})
        session = uploader.upload(["a.bin", "b.bin"]).subscribe(print)
        for response in session:
            ...
    """

    def __init__(self, config: Union[UploadConfig, dict, None] = None, client: Optional[httpx.Client] = None):
        """
        Initialize uploader.

        Args:
            config: UploadConfig or dict of allow-listed options
            client: Optional httpx client to send requests with

        Raises:
            ConfigError: If an option is not allowed or invalid
        """
        if not isinstance(config, UploadConfig):
            config = UploadConfig(config)
        self.config = config
        self.transport = UploadTransport(config, client)

    def close(self) -> None:
        self.transport.close()

    def upload(
        self,
        files: Union[PathLike, list[PathLike]],
        additional_form_data: Optional[AdditionalFormData] = None,
    ) -> UploadSession:
        """
        Prepare the upload of one file or an ordered list of files.

        Entries that are not existing regular files are skipped.

        Args:
            files: A path or a list of paths
            additional_form_data: Metadata sent with every request

        Returns:
            UploadSession to iterate for responses

        Raises:
            ValidationError: If no file remains, or the metadata field name is reserved
        """
        candidates = files if isinstance(files, (list, tuple)) else [files]
        paths = []
        for candidate in candidates:
            if isinstance(candidate, (str, os.PathLike)) and os.path.isfile(candidate):
                paths.append(candidate)
            else:
                logger.warning(f"Skipping {candidate!r}: not a regular file")

        if not paths:
            raise ValidationError("no files supplied")

        if additional_form_data is not None and additional_form_data.field_name in RESERVED_FIELDS:
            raise ValidationError(f"'{additional_form_data.field_name}' is a reserved form field name")

        return UploadSession(self, paths, additional_form_data)

    def describe(self, path: PathLike) -> FileDescriptor:
        """Build the file descriptor, hashing the whole file if checksums are enabled."""
        checksum = compute_file_checksum(path) if self.config.add_checksum else None
        return FileDescriptor.from_path(path, checksum=checksum)

    def upload_file(
        self,
        path: PathLike,
        file_index: int,
        progress: ProgressAggregator,
        additional_form_data: Optional[AdditionalFormData] = None,
    ) -> UploadResponse:
        """
        Upload one file and return the response of its terminal request.

        Raises:
            UploadError: If any request fails; later chunks are not sent
        """
        descriptor = self.describe(path)
        index = file_index if progress.file_count > 1 else None

        if not self.config.use_chunks:
            fields = build_form_fields(descriptor, additional_form_data)
            with open(path, 'rb') as f:
                content = f.read()
            response = self._send(descriptor, fields, content, file_index, progress, None)
        else:
            ranges = plan_chunks(descriptor.size, self.config.chunk_size)
            total_chunks = len(ranges)
            response = None
            for sequence, chunk_range in enumerate(ranges, start=1):
                chunk = ChunkSequenceMetadata(sequence, total_chunks)
                fields = build_form_fields(
                    descriptor,
                    additional_form_data,
                    ChunkData.build(chunk, chunk_range),
                )
                logger.debug(
                    f"Sending chunk {sequence}/{total_chunks} of {descriptor.name} "
                    f"[{chunk_range.start_byte}, {chunk_range.end_byte})"
                )
                response = self._send(
                    descriptor, fields, read_range(path, chunk_range), file_index, progress, chunk
                )

        logger.info(f"Uploaded {descriptor.name} ({descriptor.size} bytes) status={response.status}")
        return UploadResponse(
            status=response.status,
            response=response.response,
            response_headers=response.response_headers,
            file_index=index,
        )

    def _send(
        self,
        descriptor: FileDescriptor,
        fields: dict,
        content: bytes,
        file_index: int,
        progress: ProgressAggregator,
        chunk: Optional[ChunkSequenceMetadata],
    ) -> UploadResponse:
        progress.begin_request(file_index, chunk)
        response = self.transport.send(
            fields,
            descriptor.name,
            content,
            descriptor.mime_type,
            on_tick=lambda sent, total: progress.update(file_index, sent, total),
        )
        progress.update(file_index, len(content), len(content))
        progress.complete_request(file_index)
        return response
