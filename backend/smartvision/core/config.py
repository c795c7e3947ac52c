import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


DEFAULT_PORT = 3000
DEFAULT_OCR_MAX_ATTEMPTS = 10
DEFAULT_OCR_POLL_INTERVAL = 1.0


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    vision_endpoint: Optional[str] = None
    vision_key: Optional[str] = None
    blob_connection_string: Optional[str] = None
    blob_container_name: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    ocr_language: str = "en"
    ocr_max_attempts: int = DEFAULT_OCR_MAX_ATTEMPTS
    ocr_poll_interval: float = DEFAULT_OCR_POLL_INTERVAL
    vision_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the process environment (and a local .env file).

        Credentials are optional here: a missing key only disables the client
        that needs it, see ``core.clients.build_clients``.
        """
        load_dotenv()

        settings = cls(
            vision_endpoint=os.getenv("COMPUTER_VISION_ENDPOINT") or None,
            vision_key=os.getenv("COMPUTER_VISION_KEY") or None,
            blob_connection_string=os.getenv("BLOB_CONNECTION_STRING") or None,
            blob_container_name=os.getenv("BLOB_CONTAINER_NAME") or None,
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_number("PORT", DEFAULT_PORT, int),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            ocr_language=os.getenv("OCR_LANGUAGE", "en"),
            ocr_max_attempts=_env_number("OCR_MAX_ATTEMPTS", DEFAULT_OCR_MAX_ATTEMPTS, int),
            ocr_poll_interval=_env_number("OCR_POLL_INTERVAL", DEFAULT_OCR_POLL_INTERVAL, float),
            vision_timeout=_env_number("VISION_TIMEOUT", 30.0, float),
        )
        if settings.ocr_max_attempts < 1:
            raise ValueError("OCR_MAX_ATTEMPTS must be at least 1")
        if settings.ocr_poll_interval < 0:
            raise ValueError("OCR_POLL_INTERVAL cannot be negative")
        return settings
