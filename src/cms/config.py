"""Server configuration loaded from environment variables."""
from pathlib import Path

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Immutable server configuration, built once at startup.

    Attributes:
        host: Bind address for the HTTP server.
        port: Port number for the HTTP server.
        debug: Enable debug logging and API documentation.
        storage_path: Directory holding all pages and media.
        auth_tokens_file: File with one bearer token per line, or None.
        static_dir: Static site served at ``/``, or None to disable.
        max_upload_bytes: Largest accepted upload in bytes.
        page_extensions_raw: Comma-separated extensions searched by content.
        cors_origins_raw: Raw comma-separated CORS origins string.
    """

    model_config = SettingsConfigDict(
        env_prefix="CMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False
    storage_path: Path = Path("./public_html/content")
    auth_tokens_file: Path | None = Path("./auth_tokens.txt")
    static_dir: Path | None = Path("./public_html")
    max_upload_bytes: int = 10 * 1024 * 1024
    page_extensions_raw: str = ".md,.markdown"
    cors_origins_raw: str = ""

    @computed_field
    @property
    def page_extensions(self) -> list[str]:
        """Parse page extensions from comma-separated string.

        Returns:
            Lower-cased extensions, each with a leading dot.
        """
        return [
            ext if ext.startswith(".") else f".{ext}"
            for ext in (
                raw.strip().lower() for raw in self.page_extensions_raw.split(",")
            )
            if ext
        ]

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string.

        Returns:
            List of allowed origin URLs.
        """
        return [
            origin.strip()
            for origin in self.cors_origins_raw.split(",")
            if origin.strip()
        ]
