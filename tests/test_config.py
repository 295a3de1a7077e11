"""Configuration and application factory tests."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from cms.app import create_app
from cms.config import Settings
from cms.errors import (
    AlreadyExists,
    BadRequest,
    ContentError,
    ErrorKind,
    NotEmpty,
    NotFound,
    PathEscape,
    PayloadTooLarge,
    StorageIOError,
    Unauthorized,
)


def test_defaults() -> None:
    """Defaults mirror the classic layout."""
    settings = Settings(_env_file=None)  # type: ignore[call-arg]
    assert settings.port == 8080
    assert settings.storage_path == Path("./public_html/content")
    assert settings.auth_tokens_file == Path("./auth_tokens.txt")
    assert settings.max_upload_bytes == 10 * 1024 * 1024
    assert settings.page_extensions == [".md", ".markdown"]
    assert settings.cors_origins == []


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """CMS_ environment variables configure the server."""
    monkeypatch.setenv("CMS_STORAGE_PATH", str(tmp_path))
    monkeypatch.setenv("CMS_PORT", "9000")
    monkeypatch.setenv("CMS_PAGE_EXTENSIONS_RAW", "md, TXT ,")
    settings = Settings(_env_file=None)  # type: ignore[call-arg]
    assert settings.storage_path == tmp_path
    assert settings.port == 9000
    assert settings.page_extensions == [".md", ".txt"]


def test_settings_are_immutable(settings: Settings) -> None:
    """Configuration cannot change after construction."""
    with pytest.raises(ValidationError):
        settings.port = 1  # type: ignore[misc]


def test_create_app_creates_storage_root(tmp_path: Path, token_file: Path) -> None:
    """A missing storage root is created at startup."""
    root = tmp_path / "fresh"
    app = create_app(
        Settings(storage_path=root, auth_tokens_file=token_file, static_dir=None)
    )
    assert root.is_dir()
    assert app.state.store.root == root


def test_create_app_missing_token_file(tmp_path: Path) -> None:
    """A configured token file that does not exist stops startup."""
    with pytest.raises(FileNotFoundError):
        create_app(
            Settings(
                storage_path=tmp_path / "content",
                auth_tokens_file=tmp_path / "missing.txt",
                static_dir=None,
            )
        )


def test_no_token_file_rejects_mutations(tmp_path: Path) -> None:
    """Without a token file every mutation is unauthorized."""
    app = create_app(
        Settings(
            storage_path=tmp_path / "content",
            auth_tokens_file=None,
            static_dir=None,
        )
    )
    client = TestClient(app)
    response = client.post(
        "/api/page?path=a.md", content=b"x", headers={"Authorization": "Bearer x"}
    )
    assert response.status_code == 401


def test_static_site_served(tmp_path: Path, token_file: Path) -> None:
    """The static directory is served at the site root."""
    static = tmp_path / "public_html"
    static.mkdir()
    (static / "index.html").write_text("<h1>docs</h1>")
    app = create_app(
        Settings(
            storage_path=static / "content",
            auth_tokens_file=token_file,
            static_dir=static,
        )
    )
    client = TestClient(app)
    assert client.get("/").text == "<h1>docs</h1>"
    assert client.get("/api/dir?path=").status_code == 200


@pytest.mark.parametrize(
    ("error", "kind", "status"),
    [
        (BadRequest, ErrorKind.BAD_REQUEST, 400),
        (Unauthorized, ErrorKind.UNAUTHORIZED, 401),
        (NotFound, ErrorKind.NOT_FOUND, 404),
        (AlreadyExists, ErrorKind.ALREADY_EXISTS, 409),
        (NotEmpty, ErrorKind.NOT_EMPTY, 400),
        (PayloadTooLarge, ErrorKind.PAYLOAD_TOO_LARGE, 413),
        (PathEscape, ErrorKind.PATH_ESCAPE, 400),
        (StorageIOError, ErrorKind.IO_ERROR, 500),
    ],
)
def test_error_taxonomy(error: type[ContentError], kind: ErrorKind, status: int) -> None:
    """Each error kind maps to exactly one status."""
    exc = error("boom", "some/path")
    assert exc.kind is kind
    assert exc.status_code == status
    assert exc.path == "some/path"
    assert str(exc) == "boom"
