"""Live tree-walk search over stored files."""

from cms.search.engine import DEFAULT_PAGE_EXTENSIONS, SearchEngine
from cms.search.schemas import SearchHit

__all__ = [
    "DEFAULT_PAGE_EXTENSIONS",
    "SearchEngine",
    "SearchHit",
]
