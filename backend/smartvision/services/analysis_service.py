import logging
from dataclasses import dataclass
from typing import Tuple

from smartvision.services.ocr_service import OcrPoller, extract_text
from smartvision.services.vision_service import AzureVisionClient


logger = logging.getLogger(__name__)

ANALYSIS_FEATURES = ("Description", "Tags", "Objects")
NO_CAPTION = "No caption available"


@dataclass(frozen=True)
class AnalysisResult:
    caption: str
    tags: Tuple[str, ...]
    text: str

    def to_dict(self) -> dict:
        return {"caption": self.caption, "tags": list(self.tags), "text": self.text}


async def analyze_image(
    vision: AzureVisionClient,
    image_bytes: bytes,
    poller: OcrPoller,
    language: str = "en",
) -> AnalysisResult:
    """
    Caption and tag the image, then run OCR on it.
    Errors from the caption/tag call propagate; OCR problems only degrade ``text``.
    """
    analysis = await vision.analyze(image_bytes, ANALYSIS_FEATURES)
    caption = analysis.captions[0] if analysis.captions else NO_CAPTION

    extraction = await extract_text(vision, image_bytes, poller, language)
    if extraction.degraded:
        logger.info("OCR fell back to %r (state=%s)", extraction.text, extraction.state.value)

    return AnalysisResult(caption=caption, tags=tuple(analysis.tags), text=extraction.text)
