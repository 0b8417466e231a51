"""
Shared enums and helpers for image listings.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

PUBLIC_ACCESS = "public"
# Images still being processed by the face pipeline.
HOT_STATUS = "hot"


class SortKey(str, Enum):
    """Sort orders a listing can be requested in."""

    UPLOADED_AT = "uploaded_at"
    DATE_TAKEN = "date_taken"
    FILENAME = "filename"

    @property
    def descending(self) -> bool:
        return self is not SortKey.FILENAME

    @classmethod
    def parse(
        cls, value: Optional[str], default: "SortKey | None" = None
    ) -> "SortKey":
        """
        Resolve a client supplied sort key.

        A missing value yields the endpoint default; anything unrecognized
        falls back to upload time.
        """
        if not value:
            return default or cls.UPLOADED_AT
        try:
            return cls(value)
        except ValueError:
            return cls.UPLOADED_AT


class ImageView(str, Enum):
    """Which slice of a group the gallery is showing (the ``mode`` param)."""

    GALLERY = "gallery"
    BIN = "bin"
    HIGHLIGHT = "highlight"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ImageView":
        try:
            return cls(value) if value else cls.GALLERY
        except ValueError:
            return cls.GALLERY


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
