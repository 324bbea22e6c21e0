"""
ExifAI Lens

A gallery that asks a vision model for the camera, lens and exposure
settings behind each submitted photo.
"""

__version__ = "0.1.0"

from .api import InferenceClient, GeminiClient, OpenAIClient, ClaudeClient, get_client
from .core import (
    AnalysisPipeline,
    ExifMetadata,
    GalleryController,
    Item,
    ItemStatus,
    ItemStore,
    SelectionSet,
    UploadedFile,
)


def main():
    """Entry point for the exif-lens command."""
    from .cli import main as cli_main
    return cli_main()


__all__ = [
    "InferenceClient",
    "GeminiClient",
    "OpenAIClient",
    "ClaudeClient",
    "get_client",
    "AnalysisPipeline",
    "ExifMetadata",
    "GalleryController",
    "Item",
    "ItemStatus",
    "ItemStore",
    "SelectionSet",
    "UploadedFile",
]
