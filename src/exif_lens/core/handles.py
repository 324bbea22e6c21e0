"""
handles.py: Local display handles for uploaded files.

An uploaded file has no URL of its own, so its bytes are kept here and served
by the web layer under a per-item path. Handles are released when the owning
item is deleted.
"""

from typing import Dict, Optional

from ..utils.log_utils import get_logger
from .models import UploadedFile

logger = get_logger(__name__)

DEFAULT_URL_TEMPLATE = "/items/{item_id}/image"


class HandleRegistry:
    """Maps item ids to the uploaded bytes backing their display URL."""

    def __init__(self, url_template: str = DEFAULT_URL_TEMPLATE) -> None:
        self.url_template = url_template
        self._blobs: Dict[str, UploadedFile] = {}

    def __len__(self) -> int:
        return len(self._blobs)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._blobs

    def create(self, item_id: str, upload: UploadedFile) -> str:
        """Register `upload` for `item_id` and return its display URL."""
        self._blobs[item_id] = upload
        return self.url_template.format(item_id=item_id)

    def get(self, item_id: str) -> Optional[UploadedFile]:
        return self._blobs.get(item_id)

    def release(self, item_id: str) -> bool:
        """Drop the handle for `item_id`; return False if there was none."""
        if self._blobs.pop(item_id, None) is None:
            return False
        logger.debug("Released display handle for %s", item_id)
        return True
