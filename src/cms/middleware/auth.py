"""Bearer token authentication for mutating requests."""

import secrets
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from cms.errors import Unauthorized

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def load_token_file(path: Path) -> frozenset[str]:
    """Load bearer tokens, one per line.

    Surrounding whitespace is trimmed and blank lines are ignored.

    Args:
        path: Token file location.

    Returns:
        Immutable set of tokens.

    Raises:
        OSError: If the file cannot be read.
    """
    lines = path.read_text(encoding="utf-8").splitlines()
    return frozenset(line.strip() for line in lines if line.strip())


class AuthGate:
    """Validates Authorization headers against a fixed token set.

    Stateless after construction: every valid token authorizes every
    mutation, with no expiry or scoping.
    """

    def __init__(self, tokens: Iterable[str]) -> None:
        """Initialize gate.

        Args:
            tokens: Valid tokens. Empty strings are discarded.
        """
        self._tokens = frozenset(t for t in tokens if t)

    def __len__(self) -> int:
        return len(self._tokens)

    def authorize(self, header_value: str | None) -> None:
        """Check an Authorization header value.

        Args:
            header_value: Raw header value, or None if absent.

        Raises:
            Unauthorized: If the header is missing, malformed, or carries an
                unknown token.
        """
        if not header_value or not header_value.startswith(BEARER_PREFIX):
            raise Unauthorized("Authorization required")

        token = header_value[len(BEARER_PREFIX):].strip()
        if not token or not self._is_known(token):
            raise Unauthorized("Invalid token")

    def _is_known(self, token: str) -> bool:
        provided = token.encode("utf-8")
        found = False
        for known in self._tokens:
            if secrets.compare_digest(provided, known.encode("utf-8")):
                found = True
        return found


class BearerAuthMiddleware(BaseHTTPMiddleware):
    """Middleware that requires a bearer token for API mutations.

    Safe methods and paths outside the API prefix pass through untouched.
    """

    def __init__(
        self,
        app: Callable[..., Awaitable[Response]],
        gate: AuthGate,
        prefix: str = "/api",
    ) -> None:
        """Initialize middleware.

        Args:
            app: ASGI application.
            gate: Token validator.
            prefix: URL prefix of the mutating API.
        """
        super().__init__(app)  # type: ignore[arg-type]
        self._gate = gate
        self._prefix = prefix.rstrip("/") + "/"

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Reject unauthenticated mutations before they reach a route.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response, or 401 if authentication fails.
        """
        if request.method in SAFE_METHODS or not request.url.path.startswith(
            self._prefix
        ):
            return await call_next(request)

        try:
            self._gate.authorize(request.headers.get("Authorization"))
        except Unauthorized as e:
            logger.warning(
                "auth_rejected",
                method=request.method,
                path=request.url.path,
                reason=e.message,
            )
            return PlainTextResponse(e.message, status_code=e.status_code)

        return await call_next(request)
