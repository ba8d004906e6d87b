"""Filesystem storage for uploads and generated GIFs.

Uploads are written to the upload directory under a millisecond timestamp
prefix and removed once processed. Generated GIFs are written to the output
directory under a fresh UUID and kept indefinitely; the returned URL paths
are rooted at ``/outputs/``, where ``main.py`` mounts the directory.
"""

from __future__ import annotations

import logging
import os
import time
import uuid

logger = logging.getLogger(__name__)

OUTPUT_URL_PREFIX = "/outputs"


def _ensure_dir(path: str) -> None:
    """Create the directory if it does not exist."""
    os.makedirs(path, exist_ok=True)


def new_output_name() -> str:
    """Return a unique file name for a generated GIF."""
    return f"{uuid.uuid4()}.gif"


def save_upload(upload_dir: str, filename: str, data: bytes) -> str:
    """Write an uploaded file to the upload directory.

    Args:
        upload_dir: Directory for transient uploads.
        filename: Original client-side file name. Only its base name is kept.
        data: Raw upload content.

    Returns:
        The path of the written file.
    """
    _ensure_dir(upload_dir)
    base_name = os.path.basename(filename.replace("\\", "/")) or "upload.gif"
    dest_path = os.path.join(upload_dir, f"{int(time.time() * 1000)}-{base_name}")
    with open(dest_path, "wb") as f:
        f.write(data)
    return dest_path


def save_bytes(output_dir: str, name: str, data: bytes) -> str:
    """Persist generated bytes to the output directory.

    Args:
        output_dir: Directory served under ``/outputs``.
        name: File name within the output directory.
        data: Raw byte content to write.

    Returns:
        A URL path that can be used to retrieve the file.
    """
    _ensure_dir(output_dir)
    dest_path = os.path.join(output_dir, name)
    with open(dest_path, "wb") as f:
        f.write(data)
    return f"{OUTPUT_URL_PREFIX}/{name}"


def discard(path: str) -> None:
    """Remove a temporary file, ignoring files that are already gone."""
    try:
        os.remove(path)
    except FileNotFoundError:
        logger.debug("Temporary file already removed: %s", path)
