"""Entry point for the CMS server."""

import contextlib
import sys

import structlog
import uvicorn

from cms.app import create_app
from cms.config import Settings
from cms.logging import configure_logging

logger = structlog.get_logger()


def serve(settings: Settings) -> int:
    """Build the application and run uvicorn until interrupted.

    uvicorn installs its own SIGTERM/SIGINT handlers and drains in-flight
    requests before returning.

    Args:
        settings: Server configuration.

    Returns:
        Process exit code.
    """
    try:
        app = create_app(settings)
    except OSError as e:
        logger.error(
            "startup_failed",
            error=str(e),
            storage=str(settings.storage_path),
            auth_tokens_file=str(settings.auth_tokens_file),
        )
        return 1

    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level="warning",
        access_log=False,
    )
    server = uvicorn.Server(config)

    logger.info("server_starting", host=settings.host, port=settings.port)
    with contextlib.suppress(KeyboardInterrupt):
        server.run()
    return 0


def main() -> None:
    """Entry point for python -m cms.

    Every Settings field can also be given as a command-line flag,
    e.g. ``--storage_path ./content --port 9000``.
    """
    settings = Settings(_cli_parse_args=True)  # type: ignore[call-arg]
    configure_logging(debug=settings.debug)
    sys.exit(serve(settings))


if __name__ == "__main__":
    main()
