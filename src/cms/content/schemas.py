"""Pydantic schemas for content API requests and responses."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from cms.content.paths import is_single_segment


class DirEntry(BaseModel):
    """Single child of a listed directory."""

    name: str
    type: Literal["file", "dir"]


class CreateDirectoryRequest(BaseModel):
    """Request body for creating a subdirectory."""

    name: str = Field(min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is a single path segment."""
        if not is_single_segment(v):
            raise ValueError("Invalid directory name")
        return v
