"""
Naming for uploaded image records.

Stored names never reuse the client's filename: `<epoch-ms>-<random>.<ext>`
under a folder named after the project.
"""

import time
from typing import Optional, Tuple
from uuid import uuid4


def file_extension(original_filename: str) -> str:
    return original_filename.rsplit(".", 1)[-1].lower()


def storage_name(
    project_id: str, original_filename: str, now_ms: Optional[int] = None
) -> Tuple[str, str]:
    """Return (filename, file_path) for a new image in `project_id`."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    filename = f"{now_ms}-{uuid4().hex[:9]}.{file_extension(original_filename)}"
    return filename, f"{project_id}/{filename}"
