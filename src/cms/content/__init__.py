"""Content module for file-based content access."""

from cms.content.paths import (
    is_single_segment,
    is_within,
    relative_to_root,
    resolve_path,
)
from cms.content.schemas import CreateDirectoryRequest, DirEntry
from cms.content.store import DEFAULT_MAX_UPLOAD_BYTES, ContentStore

__all__ = [
    "DEFAULT_MAX_UPLOAD_BYTES",
    "ContentStore",
    "CreateDirectoryRequest",
    "DirEntry",
    "is_single_segment",
    "is_within",
    "relative_to_root",
    "resolve_path",
]
