from typing import Tuple

MAX_FILE_MB = 20


def validate_image(size_bytes: int) -> Tuple[bool, str]:
    if size_bytes == 0:
        return False, "Uploaded image is empty."
    if size_bytes > MAX_FILE_MB * 1024 * 1024:
        return False, f"File too large (> {MAX_FILE_MB}MB)"
    return True, "ok"
