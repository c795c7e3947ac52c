import json
import logging
from dataclasses import dataclass
from typing import Iterable, Tuple

import aiohttp


logger = logging.getLogger(__name__)

API_PATH = "vision/v3.2"
KEY_HEADER = "Ocp-Apim-Subscription-Key"
OCTET_STREAM = "application/octet-stream"


class VisionServiceError(Exception):
    """Raised when the Computer Vision service rejects a request."""


@dataclass(frozen=True)
class ImageAnalysis:
    captions: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ReadResult:
    status: str
    lines: Tuple[str, ...] = ()


def _parse_analysis(payload: dict) -> ImageAnalysis:
    description = payload.get("description") or {}
    captions = tuple(
        c["text"] for c in (description.get("captions") or []) if c.get("text")
    )
    tags = tuple(t["name"] for t in (payload.get("tags") or []) if t.get("name"))
    return ImageAnalysis(captions=captions, tags=tags)


def _parse_read_result(payload: dict) -> ReadResult:
    # Anything that does not look like the documented shape reads as "no text".
    status = payload.get("status")
    if not isinstance(status, str):
        status = ""
    analyze_result = payload.get("analyzeResult")
    pages = analyze_result.get("readResults") if isinstance(analyze_result, dict) else None
    first_page = pages[0] if isinstance(pages, list) and pages else None
    raw_lines = first_page.get("lines") if isinstance(first_page, dict) else None
    if not isinstance(raw_lines, list):
        raw_lines = []
    lines = tuple(
        line["text"] for line in raw_lines
        if isinstance(line, dict) and isinstance(line.get("text"), str) and line["text"]
    )
    return ReadResult(status=status, lines=lines)


class AzureVisionClient:
    """Thin async wrapper over the Computer Vision v3.2 REST API.

    One instance (and its ``aiohttp.ClientSession``) is created at startup and
    shared by every request.
    """

    def __init__(self, endpoint: str, key: str, session: aiohttp.ClientSession):
        self._base_url = f"{endpoint.rstrip('/')}/{API_PATH}"
        self._key = key
        self._session = session

    @classmethod
    def create(cls, endpoint: str | None, key: str | None, timeout: float = 30.0) -> "AzureVisionClient":
        if not endpoint or not key:
            raise VisionServiceError("COMPUTER_VISION_ENDPOINT and COMPUTER_VISION_KEY must be set")
        session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout))
        return cls(endpoint, key, session)

    def _headers(self, content_type: str | None = None) -> dict:
        headers = {KEY_HEADER: self._key}
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    async def analyze(self, image_bytes: bytes, features: Iterable[str]) -> ImageAnalysis:
        params = {"visualFeatures": ",".join(features)}
        async with self._session.post(
            f"{self._base_url}/analyze",
            params=params,
            data=image_bytes,
            headers=self._headers(OCTET_STREAM),
        ) as resp:
            payload = await self._read_json(resp, "analyze")
        return _parse_analysis(payload)

    async def start_read(self, image_bytes: bytes, language: str = "en") -> str:
        """Start a Read (OCR) operation and return its operation id."""
        async with self._session.post(
            f"{self._base_url}/read/analyze",
            params={"language": language},
            data=image_bytes,
            headers=self._headers(OCTET_STREAM),
        ) as resp:
            if resp.status != 202:
                raise await self._error(resp, "read")
            location = resp.headers.get("Operation-Location")
        if not location:
            raise VisionServiceError("Read response is missing the Operation-Location header")
        return location.rstrip("/").split("/")[-1]

    async def get_read_result(self, operation_id: str) -> ReadResult:
        async with self._session.get(
            f"{self._base_url}/read/analyzeResults/{operation_id}",
            headers=self._headers(),
        ) as resp:
            payload = await self._read_json(resp, "read result")
        return _parse_read_result(payload)

    async def close(self) -> None:
        await self._session.close()

    async def _read_json(self, resp, action: str) -> dict:
        if resp.status != 200:
            raise await self._error(resp, action)
        raw = await resp.text()
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            raise VisionServiceError(f"Vision {action} returned invalid JSON") from None
        if not isinstance(payload, dict):
            raise VisionServiceError(f"Vision {action} returned an unexpected payload")
        return payload

    @staticmethod
    async def _error(resp, action: str) -> VisionServiceError:
        raw = await resp.text()
        try:
            message = json.loads(raw)["error"]["message"]
        except (json.JSONDecodeError, KeyError, TypeError):
            message = raw.strip()[:200]
        logger.debug("Vision %s failed with HTTP %s: %s", action, resp.status, message)
        return VisionServiceError(f"Vision {action} failed: HTTP {resp.status} {message}".strip())
