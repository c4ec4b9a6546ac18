"""Entry point for the upload server."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.exceptions import ChunkWriteError, UploadException, ValidationError
from common.logging_config import setup_logging
from server import config
from server.routes.upload_routes import get_chunk_receiver, router as upload_router

logger = setup_logging('server')
setup_logging('common')

app = FastAPI(
    title="Chunked Upload Server",
    description="Receives files uploaded whole or in sequential chunks and reassembles them on disk",
    version="1.0.0"
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Ensure the storage root exists on application startup.
    """
    receiver = get_chunk_receiver()
    receiver.ensure_storage_root()
    logger.info(f"Upload server starting, storing files under {receiver.storage_root}")


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Invalid upload: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "code": "INVALID_UPLOAD"}
    )


@app.exception_handler(ChunkWriteError)
async def chunk_write_error_handler(request: Request, exc: ChunkWriteError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Chunk write error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "code": "WRITE_FAILED"}
    )


@app.exception_handler(UploadException)
async def upload_exception_handler(request: Request, exc: UploadException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Upload exception: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "code": "INTERNAL_ERROR"}
    )


app.include_router(upload_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "Chunked Upload Server API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns 200 if service is alive.
    """
    return {"status": "healthy", "service": "server"}


def main() -> None:
    """Run the server with uvicorn."""
    uvicorn.run(app, host=config.SERVER_HOST, port=config.SERVER_PORT)


if __name__ == "__main__":
    main()
