"""Live filename and page-content search over the storage tree."""

import os
from collections.abc import Iterable
from pathlib import Path

import structlog

from cms.content.paths import relative_to_root
from cms.errors import BadRequest
from cms.search.schemas import SearchHit

logger = structlog.get_logger()

DEFAULT_PAGE_EXTENSIONS: frozenset[str] = frozenset({".md", ".markdown"})


class SearchEngine:
    """Unindexed search that walks the whole storage root on every call.

    A file matches when its name contains the query, or when it is a page
    and its text contains the query. Both comparisons are case-folded.
    Entries that cannot be listed or read are skipped.
    """

    def __init__(
        self,
        root: Path,
        page_extensions: Iterable[str] = DEFAULT_PAGE_EXTENSIONS,
    ) -> None:
        """Initialize search engine.

        Args:
            root: Absolute storage root.
            page_extensions: Extensions whose content is searched.
        """
        self._root = root
        self._page_extensions = frozenset(ext.lower() for ext in page_extensions)

    def search(self, query: str) -> list[SearchHit]:
        """Find files whose name or page content contains the query.

        Args:
            query: Non-empty search string.

        Returns:
            Matching files in traversal order.

        Raises:
            BadRequest: If the query is empty.
        """
        if not query:
            raise BadRequest("Missing query")

        needle = query.casefold()
        hits: list[SearchHit] = []

        for dirpath, _dirnames, filenames in os.walk(self._root, onerror=_skip_entry):
            directory = Path(dirpath)
            for name in filenames:
                path = directory / name
                if self._matches(path, needle):
                    hits.append(
                        SearchHit(path=relative_to_root(self._root, path), name=name)
                    )

        logger.info("search_completed", query=query, hits=len(hits))
        return hits

    def is_page(self, path: Path) -> bool:
        """Check whether a file's content is searchable."""
        return path.suffix.lower() in self._page_extensions

    def _matches(self, path: Path, needle: str) -> bool:
        if needle in path.name.casefold():
            return True
        if not self.is_page(path):
            return False
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("search_read_skipped", path=str(path), error=str(e))
            return False
        return needle in text.casefold()


def _skip_entry(error: OSError) -> None:
    logger.debug("search_walk_skipped", path=error.filename, error=str(error))
