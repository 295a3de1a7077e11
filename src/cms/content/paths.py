"""Security-first path resolution for content access."""
import os
from pathlib import Path, PurePosixPath

from cms.errors import BadRequest, PathEscape


def resolve_path(root: Path, relative_path: str) -> Path:
    """Resolve a client path to an absolute path within the storage root.

    Leading slashes are dropped so every client path is root-relative.
    ``.`` and ``..`` segments are collapsed lexically; the filesystem is
    never consulted, so symlinks are not followed.

    Args:
        root: Absolute storage root.
        relative_path: Client-supplied path, relative to the root.

    Returns:
        Absolute Path for the resolved location.

    Raises:
        BadRequest: If the path contains a null byte.
        PathEscape: If the path resolves outside the root.
    """
    if "\0" in relative_path:
        raise BadRequest("Path contains null byte", relative_path)

    joined = os.path.join(root, relative_path.lstrip("/"))
    resolved = Path(os.path.normpath(joined))

    if not is_within(root, resolved):
        raise PathEscape("Invalid path", relative_path)

    return resolved


def is_within(root: Path, candidate: Path) -> bool:
    """Check whether candidate is root itself or below it.

    Compares whole path segments, so ``/data2/x`` is not inside ``/data``.

    Args:
        root: Absolute storage root.
        candidate: Absolute, normalized path.

    Returns:
        True if candidate is contained in root.
    """
    return candidate.is_relative_to(root)


def relative_to_root(root: Path, path: Path) -> str:
    """Render an absolute path inside the root as a ``/``-separated string.

    Args:
        root: Absolute storage root.
        path: Absolute path inside root.

    Returns:
        Path relative to root using forward slashes.
    """
    return PurePosixPath(*path.relative_to(root).parts).as_posix()


def is_single_segment(name: str) -> bool:
    """Check that a name is one path component.

    Args:
        name: Directory or file name supplied by a client.

    Returns:
        True if name is non-empty and contains no separators or dot segments.
    """
    if not name or name in (".", ".."):
        return False
    return not any(ch in name for ch in ("/", "\\", "\0"))
