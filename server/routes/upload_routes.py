"""Upload API routes."""

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from common.constants import FILE_FIELD
from server import config
from server.schemas.common import ErrorResponse
from server.schemas.upload import UploadResponse
from server.services.upload_service import UploadService
from server.storage import ChunkReceiver

router = APIRouter(prefix="/api", tags=["Upload"])


def get_chunk_receiver() -> ChunkReceiver:
    """
    FastAPI dependency providing the receiver for the configured storage root.
    """
    return ChunkReceiver(config.STORAGE_ROOT)


@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_file(
    request: Request,
    file: UploadFile = File(...),
    receiver: ChunkReceiver = Depends(get_chunk_receiver),
):
    """
    Receive one file or one chunk of a file.

    Parameters (multipart/form-data):
        - file: Chunk bytes, or the whole file for unchunked uploads
        - fileData: JSON file descriptor (name, size, lastModified, type, sha256Checksum?)
        - chunkData: JSON {sequence, totalChunks, startByte, endByte}, chunked uploads only
        - any other field: caller metadata, echoed back

    Returns:
        - filePath: Destination path on the server
        - every non-file field, deserialised

    Raises:
        - 400: Malformed chunkData or unsafe file name
        - 422: Missing file part
        - 500: Write failure
    """
    form = await request.form()
    fields = {
        name: value
        for name, value in form.multi_items()
        if name != FILE_FIELD and isinstance(value, str)
    }

    content = await file.read()

    return await run_in_threadpool(UploadService(receiver).store, file.filename, content, fields)
