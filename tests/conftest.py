import base64
import io
import threading

import pytest
from PIL import Image

from exif_lens.core.models import ExifMetadata, Item, ItemStatus, SourceKind, UploadedFile
from exif_lens.core.runner import LoopRunner


def make_metadata(camera="Sony A7 IV", **overrides) -> ExifMetadata:
    fields = {
        "camera": camera,
        "lens": "FE 50mm f/1.8",
        "aperture": "f/2.8",
        "shutterSpeed": "1/250s",
        "iso": "ISO 200",
        "focalLength": "50mm",
        "description": "A crisp daylight portrait with gentle background blur.",
    }
    fields.update(overrides)
    return ExifMetadata.model_validate(fields)


def png_bytes(size=(64, 48), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_upload(name="a.png", data=None, content_type="image/png") -> UploadedFile:
    return UploadedFile(filename=name, content_type=content_type, data=data if data is not None else png_bytes())


def make_item(item_id, status=ItemStatus.ANALYZING, **kwargs) -> Item:
    if status is ItemStatus.COMPLETE:
        kwargs.setdefault("metadata", make_metadata())
    if status is ItemStatus.ERROR:
        kwargs.setdefault("error", "boom")
    return Item(id=item_id, url=f"https://example.com/{item_id}.jpg",
                source_kind=SourceKind.URL, status=status, **kwargs)


class FakeClient:
    """Inference client double keyed by the raw image bytes it receives."""

    model_name = "fake-1"

    def __init__(self, default=None, responses=None):
        self.default = default if default is not None else make_metadata()
        self.responses = responses or {}
        self.calls = []
        self._lock = threading.Lock()

    def analyze_image(self, image_b64, content_type):
        raw = base64.b64decode(image_b64)
        with self._lock:
            self.calls.append((raw, content_type))
        result = self.responses.get(raw, self.default)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def metadata():
    return make_metadata()


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def runner():
    loop_runner = LoopRunner().start()
    yield loop_runner
    loop_runner.stop()
