"""
Core gallery state and the per-item analysis pipeline.
"""

from .controller import GalleryController
from .errors import (
    AnalysisError,
    AcquisitionError,
    ConfigError,
    ContentTypeError,
    EncodingError,
    FetchError,
    InferenceError,
    NetworkError,
    describe_failure,
)
from .exporter import ExportDocument, build_export
from .handles import HandleRegistry
from .image_encoder import EncodedImage, encode_image
from .item_store import ItemStore
from .models import ExifMetadata, InvalidTransition, Item, ItemStatus, SourceKind, UploadedFile
from .pipeline import AnalysisPipeline, fetch_image
from .runner import LoopRunner
from .selection import SelectionSet

__all__ = [
    "GalleryController",
    "AnalysisPipeline",
    "fetch_image",
    "ItemStore",
    "SelectionSet",
    "HandleRegistry",
    "LoopRunner",
    "ExportDocument",
    "build_export",
    "EncodedImage",
    "encode_image",
    "ExifMetadata",
    "Item",
    "ItemStatus",
    "SourceKind",
    "UploadedFile",
    "InvalidTransition",
    "AnalysisError",
    "AcquisitionError",
    "ConfigError",
    "ContentTypeError",
    "EncodingError",
    "FetchError",
    "InferenceError",
    "NetworkError",
    "describe_failure",
]
