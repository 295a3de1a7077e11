"""Page read/write/delete endpoints."""

from fastapi import APIRouter, Query, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool

from cms.content.store import ContentStore

router = APIRouter(tags=["pages"])


def _store(request: Request) -> ContentStore:
    return request.app.state.store


@router.get(
    "/page",
    response_class=Response,
    summary="Read a page",
    description="Returns the raw bytes of a stored page.",
)
def read_page(
    request: Request,
    path: str = Query(default="", description="Page path relative to the storage root"),
) -> Response:
    """Read a page's content.

    Args:
        request: FastAPI request (provides access to app state).
        path: Page path relative to the storage root.

    Returns:
        Raw page bytes as plain text.
    """
    data = _store(request).read_page(path)
    return Response(content=data, media_type="text/plain")


@router.post(
    "/page",
    response_class=PlainTextResponse,
    summary="Create or overwrite a page",
    description="Stores the raw request body at path, creating parent directories.",
)
async def write_page(
    request: Request,
    path: str = Query(default="", description="Page path relative to the storage root"),
) -> PlainTextResponse:
    """Create or overwrite a page with the request body.

    Args:
        request: FastAPI request carrying the page body.
        path: Page path relative to the storage root.

    Returns:
        Plain-text confirmation.
    """
    body = await request.body()
    await run_in_threadpool(_store(request).write_page, path, body)
    return PlainTextResponse(f"File {path} saved")


@router.delete(
    "/page",
    response_class=PlainTextResponse,
    summary="Delete a page",
)
def delete_page(
    request: Request,
    path: str = Query(default="", description="Page path relative to the storage root"),
) -> PlainTextResponse:
    """Delete a page.

    Args:
        request: FastAPI request (provides access to app state).
        path: Page path relative to the storage root.

    Returns:
        Plain-text confirmation.
    """
    _store(request).delete_page(path)
    return PlainTextResponse(f"File {path} deleted")
