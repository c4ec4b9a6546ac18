"""HTTP transport for chunk requests, with upload progress reporting."""

import io
from typing import Callable, Optional

import httpx

from client.config import UploadConfig
from common.constants import FILE_FIELD
from common.exceptions import UploadError
from common.logging_config import get_logger
from common.types import UploadResponse

logger = get_logger(__name__)

TickCallback = Callable[[int, int], None]


class ProgressReader:
    """File-like wrapper over one request body that reports bytes read by httpx."""

    def __init__(self, data: bytes, on_tick: Optional[TickCallback] = None):
        """
        Initialize the progress reader.

        Args:
            data: Bytes of the chunk (or whole file) to send
            on_tick: Called with (bytes_sent, bytes_total) after each read
        """
        self._buffer = io.BytesIO(data)
        self._total = len(data)
        self._on_tick = on_tick

    def read(self, size: int = -1) -> bytes:
        piece = self._buffer.read(size)
        if piece and self._on_tick is not None:
            self._on_tick(self._buffer.tell(), self._total)
        return piece

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        return self._buffer.seek(offset, whence)

    def tell(self) -> int:
        return self._buffer.tell()


class UploadTransport:
    """POSTs multipart chunk envelopes to the configured upload URL."""

    def __init__(self, config: UploadConfig, client: Optional[httpx.Client] = None):
        """
        Initialize transport.

        Args:
            config: Uploader configuration
            client: Optional pre-built httpx client (tests inject mock transports here)
        """
        self.config = config
        self.session = client or httpx.Client(timeout=config.get_timeout())

    def close(self) -> None:
        self.session.close()

    def _build_headers(self) -> dict:
        headers = self.config.get_headers()
        lowered = {name.lower() for name in headers}
        data = self.config.data

        if not data["cross_domain"] and "x-requested-with" not in lowered:
            headers["X-Requested-With"] = "XMLHttpRequest"

        cookie_name = data["xsrf_cookie_name"]
        header_name = data["xsrf_header_name"]
        if (data["with_credentials"] or not data["cross_domain"]) and cookie_name and header_name:
            token = self.session.cookies.get(cookie_name)
            if token:
                headers[header_name] = token

        return headers

    def send(
        self,
        fields: dict,
        file_name: str,
        content: bytes,
        content_type: str = "",
        on_tick: Optional[TickCallback] = None,
    ) -> UploadResponse:
        """
        Send one request and wait for the full response.

        Args:
            fields: Serialised non-file form fields
            file_name: Filename of the multipart file part
            content: Bytes of the file part
            content_type: MIME type of the file part
            on_tick: Progress callback receiving (bytes_sent, bytes_total)

        Returns:
            UploadResponse with decoded body

        Raises:
            UploadError: On non-2xx status or network failure (status 0)
        """
        reader = ProgressReader(content, on_tick)
        files = {FILE_FIELD: (file_name, reader, content_type or "application/octet-stream")}

        try:
            response = self.session.post(
                self.config.url,
                data=fields,
                files=files,
                headers=self._build_headers(),
                params=self.config.data["query_params"] or None,
                auth=self.config.get_auth(),
                timeout=self.config.get_timeout(),
            )
        except httpx.TransportError as e:
            logger.error(f"Network error sending {file_name}: {type(e).__name__}: {e}")
            raise UploadError(0, None, f"Network error: {e}") from e

        body = self._decode_body(response)
        if not response.is_success:
            logger.warning(f"Upload request for {file_name} failed: status={response.status_code}")
            raise UploadError(response.status_code, body)

        return UploadResponse(
            status=response.status_code,
            response=body,
            response_headers={k: v for k, v in response.headers.items() if k},
        )

    def _decode_body(self, response: httpx.Response):
        response_type = self.config.data["response_type"]
        if response_type in ("arraybuffer", "blob"):
            return response.content
        if response_type == "text":
            return response.text
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
