"""Search engine tests."""

from pathlib import Path

import pytest

from cms.errors import BadRequest
from cms.search.engine import SearchEngine


@pytest.fixture
def engine(storage: Path) -> SearchEngine:
    """Engine over the test storage root."""
    return SearchEngine(storage)


@pytest.fixture
def tree(storage: Path) -> Path:
    """Small storage tree with pages and media."""
    (storage / "notes" / "deep").mkdir(parents=True)
    (storage / "notes" / "a.md").write_text("Hello World")
    (storage / "notes" / "deep" / "b.markdown").write_text("nothing here")
    (storage / "notes" / "deep" / "Hello.png").write_bytes(b"\x89PNG")
    (storage / "media.txt").write_text("hello in a text file")
    (storage / "hello-dir").mkdir()
    return storage


def _paths(hits: list) -> set[str]:
    return {hit.path for hit in hits}


def test_empty_query_rejected(engine: SearchEngine) -> None:
    """An empty query fails before any traversal."""
    with pytest.raises(BadRequest):
        engine.search("")


def test_matches_page_content_and_filenames(tree: Path, engine: SearchEngine) -> None:
    """Page text and file names both match, case-insensitively."""
    hits = engine.search("HELLO")
    assert _paths(hits) == {"notes/a.md", "notes/deep/Hello.png"}


def test_non_page_content_not_searched(tree: Path, engine: SearchEngine) -> None:
    """Only page extensions are searched by content."""
    assert "media.txt" not in _paths(engine.search("in a text"))


def test_directories_never_match(tree: Path, engine: SearchEngine) -> None:
    """Directory names are not results."""
    assert all(hit.name != "hello-dir" for hit in engine.search("hello-dir"))


def test_hit_carries_relative_path_and_name(tree: Path, engine: SearchEngine) -> None:
    """Hits report a root-relative path and the bare name."""
    hits = engine.search("nothing")
    assert [(h.path, h.name) for h in hits] == [
        ("notes/deep/b.markdown", "b.markdown")
    ]


def test_filename_match_once_per_file(tree: Path, engine: SearchEngine) -> None:
    """A file matching by name and content appears once."""
    (tree / "world.md").write_text("world")
    hits = [h for h in engine.search("world") if h.name == "world.md"]
    assert len(hits) == 1


def test_uppercase_extension_is_page(storage: Path, engine: SearchEngine) -> None:
    """Extension matching ignores case."""
    (storage / "README.MD").write_text("needle")
    assert _paths(engine.search("needle")) == {"README.MD"}


def test_invalid_utf8_does_not_abort(storage: Path, engine: SearchEngine) -> None:
    """Undecodable bytes are replaced rather than failing the walk."""
    (storage / "bad.md").write_bytes(b"\xff\xfe needle \xff")
    assert _paths(engine.search("needle")) == {"bad.md"}


def test_unreadable_file_is_skipped(
    storage: Path, engine: SearchEngine, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A read failure drops that entry and the walk continues."""
    (storage / "locked.md").write_text("needle")
    (storage / "open.md").write_text("needle")
    original = Path.read_text

    def flaky_read_text(self: Path, *args: object, **kwargs: object) -> str:
        if self.name == "locked.md":
            raise PermissionError("denied")
        return original(self, *args, **kwargs)  # type: ignore[arg-type]

    monkeypatch.setattr(Path, "read_text", flaky_read_text)
    assert _paths(engine.search("needle")) == {"open.md"}


def test_custom_page_extensions(storage: Path) -> None:
    """Content search follows the configured extensions."""
    (storage / "notes.txt").write_text("needle")
    engine = SearchEngine(storage, page_extensions=[".TXT"])
    assert engine.is_page(storage / "notes.txt")
    assert _paths(engine.search("needle")) == {"notes.txt"}


def test_sees_changes_without_reindexing(storage: Path, engine: SearchEngine) -> None:
    """Every call walks the live tree."""
    assert engine.search("fresh") == []
    (storage / "fresh.md").write_text("x")
    assert _paths(engine.search("fresh")) == {"fresh.md"}
