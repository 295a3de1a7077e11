"""Pydantic schemas for search API responses."""

from pydantic import BaseModel, Field


class SearchHit(BaseModel):
    """Single matching file.

    Attributes:
        path: Location relative to the storage root, ``/``-separated.
        name: File name.
    """

    path: str = Field(description="Path relative to the storage root")
    name: str
