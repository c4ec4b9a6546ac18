"""Project-wide constants (chunk sizing, multipart field names, transport options)."""

ONE_KB: int = 1024
DEFAULT_CHUNK_SIZE_BYTES: int = ONE_KB * ONE_KB  # 1 MiB default chunk size

FILE_FIELD = "file"
FILE_DATA_FIELD = "fileData"
CHUNK_DATA_FIELD = "chunkData"
RESERVED_FIELDS = (FILE_FIELD, FILE_DATA_FIELD, CHUNK_DATA_FIELD)

UPLOAD_ENDPOINT = "/api/upload"

TRANSPORT_OPTIONS = (
    "url",
    "headers",
    "timeout",
    "user",
    "password",
    "cross_domain",
    "with_credentials",
    "xsrf_cookie_name",
    "xsrf_header_name",
    "response_type",
    "query_params",
)
PROTOCOL_OPTIONS = ("chunk_size", "add_checksum", "use_chunks")

RESPONSE_TYPES = ("json", "text", "arraybuffer", "blob")
