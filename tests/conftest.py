"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from fastapi.testclient import TestClient

from cms.app import create_app
from cms.config import Settings
from cms.content.store import ContentStore


@pytest.fixture
def storage(tmp_path: Path) -> Path:
    """Empty storage root."""
    root = tmp_path / "content"
    root.mkdir()
    return root


@pytest.fixture
def token() -> str:
    """Valid bearer token."""
    return "test-token-123"


@pytest.fixture
def token_file(tmp_path: Path, token: str) -> Path:
    """Token file with two valid tokens and blank lines."""
    path = tmp_path / "auth_tokens.txt"
    path.write_text(f"\n  {token}  \n\nother-token\n")
    return path


@pytest.fixture
def settings(storage: Path, token_file: Path) -> Settings:
    """Create test settings."""
    return Settings(
        host="127.0.0.1",
        port=8080,
        debug=True,
        storage_path=storage,
        auth_tokens_file=token_file,
        static_dir=None,
        max_upload_bytes=1024,
    )


@pytest.fixture
def client(settings: Settings) -> TestClient:
    """Create test client with configured app."""
    app = create_app(settings)
    return TestClient(app)


@pytest.fixture
def auth(token: str) -> dict[str, str]:
    """Headers carrying a valid bearer token."""
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def store(storage: Path) -> ContentStore:
    """Store rooted at the test storage directory."""
    return ContentStore(storage)
