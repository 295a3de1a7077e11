"""Filesystem-backed storage engine for pages, media and directories."""

import errno
import os
from pathlib import Path
from typing import BinaryIO

import structlog

from cms.content.paths import is_single_segment, relative_to_root, resolve_path
from cms.content.schemas import DirEntry
from cms.errors import (
    AlreadyExists,
    BadRequest,
    NotEmpty,
    NotFound,
    PayloadTooLarge,
    StorageIOError,
)

logger = structlog.get_logger()

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MiB
READ_CHUNK_SIZE = 64 * 1024


class ContentStore:
    """Create, read, update and delete nodes under a single storage root.

    Every client path goes through resolve_path before the filesystem is
    touched. There is no locking: the filesystem is the only source of
    truth and concurrent writers race with last-write-wins.
    """

    def __init__(self, root: Path) -> None:
        """Initialize store.

        Args:
            root: Absolute, normalized storage root.
        """
        self._root = root

    @property
    def root(self) -> Path:
        """Absolute storage root."""
        return self._root

    def resolve(self, path: str) -> Path:
        """Resolve a client path inside the storage root."""
        return resolve_path(self._root, path)

    def read_page(self, path: str) -> bytes:
        """Read a page's raw bytes.

        Args:
            path: Page path relative to the root.

        Returns:
            File content.

        Raises:
            NotFound: If the page is absent or the path is a directory.
            StorageIOError: On any other read failure.
        """
        target = self._require_path(path)
        try:
            return target.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise NotFound("Could not read file", path) from e
        except OSError as e:
            raise StorageIOError(f"Failed to read file: {e.strerror}", path) from e

    def write_page(self, path: str, data: bytes) -> Path:
        """Create or overwrite a page, creating missing ancestors first.

        The write is a single call with no staging; a crash mid-write can
        leave a truncated file.

        Args:
            path: Page path relative to the root.
            data: Full page content.

        Returns:
            Absolute path of the written file.

        Raises:
            StorageIOError: If directories or the file cannot be written.
        """
        target = self._require_path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError("Failed to create directories", path) from e
        try:
            target.write_bytes(data)
        except OSError as e:
            raise StorageIOError("Failed to write file", path) from e

        logger.info("page_saved", path=path, size=len(data))
        return target

    def delete_page(self, path: str) -> None:
        """Delete a page.

        Raises:
            NotFound: If the page is absent or the path is a directory.
            StorageIOError: On any other removal failure.
        """
        target = self._require_path(path)
        if target.is_dir():
            raise NotFound("Could not delete file", path)
        try:
            target.unlink()
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFound("Could not delete file", path) from e
        except OSError as e:
            raise StorageIOError("Could not delete file", path) from e

        logger.info("page_deleted", path=path)

    def list_directory(self, path: str) -> list[DirEntry]:
        """List the immediate children of a directory.

        Order is whatever the filesystem enumerates; callers must not rely
        on it being sorted.

        Args:
            path: Directory path relative to the root; empty lists the root.

        Returns:
            One entry per child.

        Raises:
            NotFound: If the directory does not exist or is a file.
        """
        target = self.resolve(path)
        try:
            with os.scandir(target) as entries:
                return [
                    DirEntry(
                        name=entry.name,
                        type="dir" if _is_dir(entry) else "file",
                    )
                    for entry in entries
                ]
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFound("Directory not found", path) from e
        except OSError as e:
            raise StorageIOError("Could not read directory", path) from e

    def create_directory(self, parent: str, name: str) -> Path:
        """Create a single subdirectory.

        Not idempotent: a second call with the same arguments fails.

        Args:
            parent: Existing parent directory, relative to the root.
            name: Single path segment for the new directory.

        Returns:
            Absolute path of the new directory.

        Raises:
            BadRequest: If name is not a single path segment.
            AlreadyExists: If something already exists at the target.
            NotFound: If the parent is missing.
        """
        if not is_single_segment(name):
            raise BadRequest("Invalid directory name", name)

        target = self.resolve(os.path.join(parent, name))
        try:
            target.mkdir()
        except FileExistsError as e:
            raise AlreadyExists(f"Directory {name} already exists", name) from e
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFound("Parent directory not found", parent) from e
        except OSError as e:
            raise StorageIOError("Failed to create directory", name) from e

        logger.info("directory_created", parent=parent, name=name)
        return target

    def delete_directory(self, path: str) -> None:
        """Remove an empty directory.

        Raises:
            BadRequest: If path is the storage root.
            NotEmpty: If the directory has any children.
            NotFound: If the directory is absent or is a file.
        """
        target = self.resolve(path)
        if target == self._root:
            raise BadRequest("Cannot delete storage root", path)

        try:
            target.rmdir()
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFound("Directory not found", path) from e
        except OSError as e:
            if e.errno in (errno.ENOTEMPTY, errno.EEXIST):
                raise NotEmpty("Directory not empty", path) from e
            raise StorageIOError("Directory could not be removed", path) from e

        logger.info("directory_deleted", path=path)

    def upload_file(
        self,
        dir_path: str,
        filename: str,
        stream: BinaryIO,
        max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> str:
        """Store an uploaded file, overwriting any file of the same name.

        At most ``max_bytes`` are accepted. The stream is read fully into
        memory before anything is written, so an oversized upload leaves
        the target untouched.

        Args:
            dir_path: Existing directory, relative to the root.
            filename: Client filename; only its final component is used.
            stream: Readable binary stream with the upload body.
            max_bytes: Size cap in bytes.

        Returns:
            Path of the stored file relative to the root.

        Raises:
            BadRequest: If the filename is empty.
            NotFound: If the directory does not exist.
            PayloadTooLarge: If the stream holds more than max_bytes.
            StorageIOError: If the file cannot be written.
        """
        name = _base_name(filename)
        if not is_single_segment(name):
            raise BadRequest("Missing file name", filename)

        directory = self.resolve(dir_path)
        target = self.resolve(os.path.join(dir_path, name))
        if not directory.is_dir():
            raise NotFound("Directory not found", dir_path)

        data = _read_capped(stream, max_bytes)
        if data is None:
            logger.warning(
                "upload_rejected_too_large",
                path=dir_path,
                filename=name,
                max_bytes=max_bytes,
            )
            raise PayloadTooLarge(
                f"File too large (max {max_bytes} bytes)", dir_path
            )

        try:
            target.write_bytes(data)
        except OSError as e:
            raise StorageIOError("Unable to save file", dir_path) from e

        stored = relative_to_root(self._root, target)
        logger.info("file_uploaded", path=stored, size=len(data))
        return stored

    def delete_file(self, dir_path: str, filename: str) -> None:
        """Delete a file from a directory.

        Raises:
            BadRequest: If the filename is missing or not a single segment.
            NotFound: If the file does not exist.
        """
        if not is_single_segment(filename):
            raise BadRequest("Missing file parameter", filename)

        target = self.resolve(os.path.join(dir_path, filename))
        if target.is_dir():
            raise NotFound("File not found", filename)
        try:
            target.unlink()
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFound("File not found", filename) from e
        except OSError as e:
            raise StorageIOError("Failed to delete file", filename) from e

        logger.info("file_deleted", path=relative_to_root(self._root, target))

    def _require_path(self, path: str) -> Path:
        """Resolve a path that must name something below the root."""
        if not path.strip("/"):
            raise BadRequest("Missing path parameter", path)
        target = self.resolve(path)
        if target == self._root:
            raise BadRequest("Missing path parameter", path)
        return target


def _is_dir(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def _base_name(filename: str) -> str:
    """Strip any client-side directory from an uploaded filename."""
    return filename.replace("\\", "/").rsplit("/", 1)[-1]


def _read_capped(stream: BinaryIO, max_bytes: int) -> bytes | None:
    """Read a stream, giving up once it exceeds max_bytes.

    Returns:
        The full content, or None if the stream is larger than max_bytes.
    """
    buf = bytearray()
    while True:
        chunk = stream.read(READ_CHUNK_SIZE)
        if not chunk:
            return bytes(buf)
        buf.extend(chunk)
        if len(buf) > max_bytes:
            return None
