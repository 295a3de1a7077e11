"""Streaming multipart reader that enforces the upload cap while receiving."""

from collections.abc import AsyncIterator

import structlog
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from cms.errors import BadRequest, PayloadTooLarge

logger = structlog.get_logger()

# Allowance for boundaries, part headers and small form fields.
MULTIPART_OVERHEAD = 64 * 1024


class UploadedFile:
    """File part pulled out of a multipart body.

    Attributes:
        filename: Filename as sent by the client.
        data: Part content, never longer than the cap.
    """

    def __init__(self, filename: str, data: bytes) -> None:
        self.filename = filename
        self.data = data


class _PartCollector:
    """python-multipart callbacks that keep only the named file part."""

    def __init__(self, field_name: str, max_bytes: int) -> None:
        self._field_name = field_name.encode("utf-8")
        self._max_bytes = max_bytes
        self._header_field = b""
        self._header_value = b""
        self._headers: dict[bytes, bytes] = {}
        self._capturing = False
        self.filename: str | None = None
        self.data = bytearray()
        self.too_large = False

    def callbacks(self) -> dict:
        return {
            "on_part_begin": self._on_part_begin,
            "on_header_field": self._on_header_field,
            "on_header_value": self._on_header_value,
            "on_header_end": self._on_header_end,
            "on_headers_finished": self._on_headers_finished,
            "on_part_data": self._on_part_data,
            "on_part_end": self._on_part_end,
        }

    def _on_part_begin(self) -> None:
        self._headers = {}
        self._capturing = False

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._headers[self._header_field.lower()] = self._header_value
        self._header_field = b""
        self._header_value = b""

    def _on_headers_finished(self) -> None:
        _, options = parse_options_header(self._headers.get(b"content-disposition", b""))
        if (
            self.filename is None
            and options.get(b"name") == self._field_name
            and b"filename" in options
        ):
            self.filename = options[b"filename"].decode("utf-8", errors="replace")
            self._capturing = True

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        if not self._capturing or self.too_large:
            return
        if len(self.data) + (end - start) > self._max_bytes:
            self.too_large = True
            self.data.clear()
            return
        self.data.extend(data[start:end])

    def _on_part_end(self) -> None:
        self._capturing = False


def check_content_length(header_value: str | None, max_bytes: int) -> None:
    """Reject a request whose declared size cannot fit under the cap.

    Args:
        header_value: Raw Content-Length header, or None for chunked bodies.
        max_bytes: Upload cap in bytes.

    Raises:
        BadRequest: If the header is not a number.
        PayloadTooLarge: If the declared body exceeds cap plus overhead.
    """
    if header_value is None:
        return
    try:
        declared = int(header_value)
    except ValueError as e:
        raise BadRequest("Invalid Content-Length") from e
    if declared > max_bytes + MULTIPART_OVERHEAD:
        raise PayloadTooLarge(f"File too large (max {max_bytes} bytes)")


async def read_upload(
    stream: AsyncIterator[bytes],
    content_type: str | None,
    max_bytes: int,
    field_name: str = "file",
) -> UploadedFile:
    """Parse a multipart body chunk by chunk, keeping one file part.

    Receiving stops as soon as the file part passes ``max_bytes`` or the
    body passes ``max_bytes`` plus overhead; the rest of the body is never
    read.

    Args:
        stream: Request body chunks.
        content_type: Request Content-Type header.
        max_bytes: Upload cap in bytes.
        field_name: Form field carrying the file.

    Returns:
        The file part's name and content.

    Raises:
        BadRequest: If the body is not multipart or lacks the file field.
        PayloadTooLarge: If the cap is exceeded.
    """
    ctype, options = parse_options_header(content_type or "")
    boundary = options.get(b"boundary")
    if ctype != b"multipart/form-data" or not boundary:
        raise BadRequest("Failed to parse multipart form")

    collector = _PartCollector(field_name, max_bytes)
    parser = MultipartParser(boundary, collector.callbacks())
    body_limit = max_bytes + MULTIPART_OVERHEAD
    received = 0

    try:
        async for chunk in stream:
            received += len(chunk)
            if received > body_limit:
                raise PayloadTooLarge(f"File too large (max {max_bytes} bytes)")
            parser.write(chunk)
            if collector.too_large:
                raise PayloadTooLarge(f"File too large (max {max_bytes} bytes)")
        parser.finalize()
    except MultipartParseError as e:
        raise BadRequest("Failed to parse multipart form") from e

    if collector.filename is None:
        raise BadRequest("Failed to get file from form")

    logger.debug("upload_received", filename=collector.filename, bytes=received)
    return UploadedFile(collector.filename, bytes(collector.data))
