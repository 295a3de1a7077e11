"""Filename and page-content search endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Query, Request

from cms.search.schemas import SearchHit

if TYPE_CHECKING:
    from cms.search.engine import SearchEngine

router = APIRouter(tags=["search"])


@router.get(
    "/search",
    response_model=list[SearchHit],
    summary="Search file names and page text",
    description="Walks the whole storage tree; results follow traversal order.",
)
def search(
    request: Request,
    q: str = Query(default="", description="Search query string"),
) -> list[SearchHit]:
    """Search file names and page contents.

    Args:
        request: FastAPI request (provides access to app state).
        q: Case-insensitive query string.

    Returns:
        One hit per matching file.
    """
    search_engine: SearchEngine = request.app.state.search_engine
    return search_engine.search(q)
