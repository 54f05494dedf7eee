# src/geostamp/archive.py
"""Output file naming and the zip archive for multi-file downloads."""

import io
import zipfile
from pathlib import PurePath
from typing import Iterable, Optional, Set, Tuple

from .constants import GEOTAG_PREFIX, STAMPED_SUFFIX
from .exif_codec import JPEG, WEBP


def stamped_filename(name: str) -> str:
    """photo.heic -> photo_STAMPED.jpg"""
    return f"{PurePath(name).stem}{STAMPED_SUFFIX}.jpg"


def geotag_filename(index: int, container: Optional[str] = JPEG) -> str:
    """1-based EXIF_GPS_<n>, .webp for WebP output and .jpg otherwise."""
    extension = ".webp" if container == WEBP else ".jpg"
    return f"{GEOTAG_PREFIX}{index + 1}{extension}"


def archive_filename(first_name: str) -> str:
    return f"{PurePath(first_name).stem}{STAMPED_SUFFIX}.zip"


def _unique_name(name: str, used: Set[str]) -> str:
    if name not in used:
        return name
    path = PurePath(name)
    i = 1
    while True:
        candidate = f"{path.stem}_{i}{path.suffix}"
        if candidate not in used:
            return candidate
        i += 1


def build_archive(entries: Iterable[Tuple[str, bytes]]) -> bytes:
    """Zip (filename, bytes) pairs in order; repeated names get _1, _2..."""
    buffer = io.BytesIO()
    used: Set[str] = set()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries:
            name = _unique_name(name, used)
            used.add(name)
            zf.writestr(name, data)
    return buffer.getvalue()
