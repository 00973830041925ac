"""Helpers for building Drive query strings and upload file names."""
from __future__ import annotations

import re
from typing import List

__all__ = [
    "escape_query_value",
    "split_folder_path",
    "build_photo_filename",
]


def escape_query_value(value: str) -> str:
    """Escape a literal for use inside a single-quoted Drive ``q`` expression."""

    return (value or "").replace("\\", "\\\\").replace("'", "\\'")


def split_folder_path(path: str) -> List[str]:
    return [part.strip() for part in re.split(r"[\\/]+", path or "") if part.strip()]


def build_photo_filename(photo_type: str, incident_id: str, filename: str) -> str:
    parts = [photo_type.strip(), incident_id.strip(), filename.strip()]
    return "_".join(part for part in parts if part)
