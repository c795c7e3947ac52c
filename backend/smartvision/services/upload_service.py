import re
import time
from typing import Callable

from smartvision.services.storage_service import BlobStorage


DEFAULT_FILENAME = "image"
_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.]")


def _now_ms() -> int:
    return int(time.time() * 1000)


def blob_name_for(filename: str | None, clock: Callable[[], int] = _now_ms) -> str:
    """Timestamp-prefixed, storage-safe name; e.g. ``1700000000000-my-photo-.png``."""
    safe_name = _UNSAFE_CHARS.sub("-", filename or DEFAULT_FILENAME)
    return f"{clock()}-{safe_name}"


async def upload_image(
    storage: BlobStorage,
    image_bytes: bytes,
    filename: str | None,
    content_type: str | None = None,
    clock: Callable[[], int] = _now_ms,
) -> str:
    # Two uploads of the same name within one millisecond overwrite each other.
    name = blob_name_for(filename, clock)
    return await storage.store(image_bytes, name, content_type)
