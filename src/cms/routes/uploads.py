"""Media upload and deletion endpoints."""

import io

from fastapi import APIRouter, Query, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from cms.config import Settings
from cms.content.store import ContentStore
from cms.content.upload_stream import check_content_length, read_upload

router = APIRouter(tags=["uploads"])


@router.post(
    "/upload",
    response_class=PlainTextResponse,
    responses={413: {"description": "Upload exceeds the size cap"}},
    summary="Upload a file",
    description="Stores the multipart field 'file' in the directory, overwriting any file of the same name.",
)
async def upload_file(
    request: Request,
    path: str = Query(default="", description="Target directory path"),
) -> PlainTextResponse:
    """Store an uploaded file.

    The multipart body is parsed as it arrives, so an oversized upload is
    refused without receiving it in full.

    Args:
        request: FastAPI request carrying the multipart body.
        path: Target directory relative to the storage root.

    Returns:
        Plain-text confirmation.
    """
    store: ContentStore = request.app.state.store
    settings: Settings = request.app.state.settings

    check_content_length(
        request.headers.get("content-length"), settings.max_upload_bytes
    )
    upload = await read_upload(
        request.stream(),
        request.headers.get("content-type"),
        settings.max_upload_bytes,
    )

    stored = await run_in_threadpool(
        store.upload_file,
        path,
        upload.filename,
        io.BytesIO(upload.data),
        max_bytes=settings.max_upload_bytes,
    )
    name = stored.rsplit("/", 1)[-1]
    return PlainTextResponse(f"File {name} uploaded")


@router.delete(
    "/upload",
    response_class=PlainTextResponse,
    summary="Delete an uploaded file",
)
def delete_file(
    request: Request,
    path: str = Query(default="", description="Directory holding the file"),
    file: str = Query(default="", description="File name"),
) -> PlainTextResponse:
    """Delete a file from a directory.

    Args:
        request: FastAPI request (provides access to app state).
        path: Directory relative to the storage root.
        file: Name of the file to delete.

    Returns:
        Plain-text confirmation.
    """
    store: ContentStore = request.app.state.store
    store.delete_file(path, file)
    return PlainTextResponse(f"File {file} deleted")
