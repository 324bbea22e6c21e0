"""
models.py: Data model for analyzed gallery items.

An Item is an immutable value; every state change produces a new Item through
`Item.evolve`, which also enforces the status lifecycle:

    pending -> analyzing -> complete | error

`complete` and `error` are terminal. `pending` is reserved and never produced
by the submission flow.
"""

import dataclasses
import mimetypes
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemStatus(str, Enum):
    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemStatus.COMPLETE, ItemStatus.ERROR)


class SourceKind(str, Enum):
    FILE = "file"
    URL = "url"


# Allowed status changes; anything else is rejected by Item.evolve.
TRANSITIONS = {
    ItemStatus.PENDING: {ItemStatus.ANALYZING},
    ItemStatus.ANALYZING: {ItemStatus.COMPLETE, ItemStatus.ERROR},
    ItemStatus.COMPLETE: set(),
    ItemStatus.ERROR: set(),
}

STATUS_FILTERS = ("all", "complete", "analyzing", "error")


class InvalidTransition(ValueError):
    """Raised when an item is moved to a status its lifecycle does not allow."""


class ExifMetadata(BaseModel):
    """Camera and exposure details returned by the inference service.

    Values are free-text display strings; nothing is parsed or validated
    beyond presence.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    camera: str
    lens: str
    aperture: str
    shutter_speed: str = Field(alias="shutterSpeed")
    iso: str
    focal_length: str = Field(alias="focalLength")
    description: str

    def to_export(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class UploadedFile:
    """An in-memory upload: original name, declared content type and bytes."""
    filename: str
    content_type: str
    data: bytes

    @property
    def is_image(self) -> bool:
        return self.content_type.lower().startswith("image/")


GENERIC_CONTENT_TYPE = "application/octet-stream"
mimetypes.add_type("image/heic", ".heic")
mimetypes.add_type("image/heif", ".heif")


def guess_content_type(filename: str, declared: Optional[str] = None) -> str:
    """Declared type if it is specific, otherwise a guess from the file name."""
    if declared and declared != GENERIC_CONTENT_TYPE:
        return declared
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or GENERIC_CONTENT_TYPE


def new_item_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class Item:
    """One submitted image and its analysis outcome.

    `url` is the display handle: the remote URL for URL items, or the local
    handle served by the web layer for uploaded files.
    """
    id: str
    url: str
    source_kind: SourceKind
    status: ItemStatus = ItemStatus.ANALYZING
    metadata: Optional[ExifMetadata] = None
    error: Optional[str] = None
    filename: Optional[str] = None
    content_type: Optional[str] = None

    def __post_init__(self) -> None:
        if self.status is ItemStatus.COMPLETE:
            if self.metadata is None or self.error is not None:
                raise ValueError("complete items carry metadata and no error")
        elif self.status is ItemStatus.ERROR:
            if not self.error or self.metadata is not None:
                raise ValueError("error items carry an error message and no metadata")
        elif self.metadata is not None or self.error is not None:
            raise ValueError(f"{self.status.value} items carry neither metadata nor error")

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def evolve(self, **changes: Any) -> "Item":
        """Return a copy with `changes` applied, checking the status transition."""
        if "id" in changes and changes["id"] != self.id:
            raise ValueError("item id is immutable")
        status = ItemStatus(changes.get("status", self.status))
        changes["status"] = status
        if status is not self.status and status not in TRANSITIONS[self.status]:
            raise InvalidTransition(
                f"item {self.id}: {self.status.value} -> {status.value} is not allowed"
            )
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "url": self.url,
            "source": self.source_kind.value,
            "status": self.status.value,
            "filename": self.filename,
            "exifData": self.metadata.to_export() if self.metadata else None,
            "error": self.error,
        }
