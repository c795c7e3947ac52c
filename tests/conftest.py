import pytest

from smartvision.core.clients import Clients
from smartvision.services.ocr_service import OcrPoller
from smartvision.services.vision_service import ImageAnalysis, ReadResult


class FakeVision:
    """In-memory stand-in for AzureVisionClient that records every call."""

    def __init__(self, analysis=None, read_results=(), analyze_error=None, read_error=None):
        self.analysis = analysis or ImageAnalysis(captions=("a cat on a sofa",), tags=("cat", "indoor"))
        self.read_results = list(read_results) or [ReadResult("succeeded", ("HELLO", "WORLD"))]
        self.analyze_error = analyze_error
        self.read_error = read_error
        self.calls = []

    async def analyze(self, image_bytes, features):
        self.calls.append(("analyze", tuple(features)))
        if self.analyze_error:
            raise self.analyze_error
        return self.analysis

    async def start_read(self, image_bytes, language="en"):
        self.calls.append(("start_read", language))
        if self.read_error:
            raise self.read_error
        return "op-123"

    async def get_read_result(self, operation_id):
        self.calls.append(("get_read_result", operation_id))
        if len(self.read_results) > 1:
            return self.read_results.pop(0)
        return self.read_results[0]

    async def close(self):
        self.calls.append(("close",))


class FakeStorage:
    def __init__(self, error=None):
        self.error = error
        self.stored = []

    async def store(self, data, name, content_type=None):
        if self.error:
            raise self.error
        self.stored.append((data, name, content_type))
        return f"https://example.blob.core.windows.net/images/{name}"

    async def close(self):
        pass


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def poller(sleep):
    return OcrPoller(max_attempts=10, delay=1.0, sleep=sleep)


@pytest.fixture
def vision():
    return FakeVision()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def clients(vision, storage, poller):
    return Clients(poller=poller, vision=vision, storage=storage)
