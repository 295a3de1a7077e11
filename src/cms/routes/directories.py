"""Directory listing, creation and removal endpoints."""

from fastapi import APIRouter, Query, Request
from fastapi.responses import PlainTextResponse

from cms.content.schemas import CreateDirectoryRequest, DirEntry
from cms.content.store import ContentStore

router = APIRouter(tags=["directories"])


def _store(request: Request) -> ContentStore:
    return request.app.state.store


@router.get(
    "/dir",
    response_model=list[DirEntry],
    summary="List a directory",
    description="Returns the immediate children of a directory in filesystem order.",
)
def list_directory(
    request: Request,
    path: str = Query(default="", description="Directory path; empty for the root"),
) -> list[DirEntry]:
    """List a directory.

    Args:
        request: FastAPI request (provides access to app state).
        path: Directory path relative to the storage root.

    Returns:
        Name and type of every child.
    """
    return _store(request).list_directory(path)


@router.post(
    "/dir",
    response_class=PlainTextResponse,
    summary="Create a subdirectory",
)
def create_directory(
    request: Request,
    body: CreateDirectoryRequest,
    path: str = Query(default="", description="Parent directory path"),
) -> PlainTextResponse:
    """Create a subdirectory under path.

    Args:
        request: FastAPI request (provides access to app state).
        body: JSON body naming the new directory.
        path: Parent directory path relative to the storage root.

    Returns:
        Plain-text confirmation.
    """
    _store(request).create_directory(path, body.name)
    return PlainTextResponse(f"Directory {body.name} created")


@router.delete(
    "/dir",
    response_class=PlainTextResponse,
    summary="Delete an empty directory",
)
def delete_directory(
    request: Request,
    path: str = Query(default="", description="Directory path"),
) -> PlainTextResponse:
    """Delete a directory that has no children.

    Args:
        request: FastAPI request (provides access to app state).
        path: Directory path relative to the storage root.

    Returns:
        Plain-text confirmation.
    """
    _store(request).delete_directory(path)
    return PlainTextResponse(f"Directory {path} deleted")
