import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple

from smartvision.services.vision_service import AzureVisionClient


logger = logging.getLogger(__name__)

NO_TEXT = "No text detected"
TEXT_UNAVAILABLE = "Text detection unavailable"

# Read operation statuses that mean "ask again later".
PENDING_STATUSES = frozenset({"notStarted", "running"})
SUCCEEDED = "succeeded"


class OcrState(str, Enum):
    NOT_STARTED = "notStarted"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class TextExtraction:
    """Outcome of a best-effort OCR run.

    ``degraded`` is True whenever ``text`` is a fallback value rather than
    recognized text.
    """

    state: OcrState
    lines: Tuple[str, ...] = ()
    attempts: int = 0
    error: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.state is not OcrState.SUCCEEDED or not self.lines

    @property
    def text(self) -> str:
        if not self.degraded:
            return " ".join(self.lines)
        if self.error is not None:
            return TEXT_UNAVAILABLE
        return NO_TEXT

    @classmethod
    def unavailable(cls, error: str, attempts: int = 0) -> "TextExtraction":
        return cls(state=OcrState.FAILED, attempts=attempts, error=error)


class OcrPoller:
    """
    Turns a remote Read operation into a bounded wait.
    Each attempt sleeps ``delay`` seconds and then queries the status once.
    """

    def __init__(
        self,
        max_attempts: int = 10,
        delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.delay = delay
        self._sleep = sleep

    async def wait(self, vision: AzureVisionClient, operation_id: str) -> TextExtraction:
        state = OcrState.NOT_STARTED
        result = None
        for attempt in range(1, self.max_attempts + 1):
            await self._sleep(self.delay)
            try:
                result = await vision.get_read_result(operation_id)
            except Exception as exc:
                logger.error("OCR Error (non-critical): %s", exc)
                return TextExtraction.unavailable(str(exc), attempts=attempt)
            if result.status not in PENDING_STATUSES:
                break
            state = OcrState.RUNNING
        else:
            logger.warning(
                "OCR operation %s still %s after %d attempts, giving up",
                operation_id, state.value, self.max_attempts,
            )
            return TextExtraction(state=OcrState.EXHAUSTED, attempts=self.max_attempts)

        if result.status == SUCCEEDED:
            if not result.lines:
                logger.info("OCR operation %s succeeded without any text", operation_id)
            return TextExtraction(state=OcrState.SUCCEEDED, lines=result.lines, attempts=attempt)

        logger.warning("OCR operation %s ended with status %r", operation_id, result.status)
        return TextExtraction(state=OcrState.FAILED, attempts=attempt)


async def extract_text(
    vision: AzureVisionClient,
    image_bytes: bytes,
    poller: OcrPoller,
    language: str = "en",
) -> TextExtraction:
    """
    Runs OCR on the image without ever raising.
    A failure to start the operation is reported the same way as a failed poll.
    """
    try:
        operation_id = await vision.start_read(image_bytes, language)
    except Exception as exc:
        logger.error("OCR Error (non-critical): %s", exc)
        return TextExtraction.unavailable(str(exc))
    return await poller.wait(vision, operation_id)
