"""
errors.py: Failure classes for the analysis pipeline.

Failures are classified where they are caught (HTTP status, connection error,
content type, encoding, inference) so the user-facing message can be derived
from the class instead of from the message text.
"""

from typing import Optional

from .models import SourceKind

CORS_MESSAGE = "CORS Access Restricted. Try downloading the image and uploading it manually."
FILE_FALLBACK_MESSAGE = "Failed to analyze file."
URL_FALLBACK_MESSAGE = "Could not process URL."


class ConfigError(ValueError):
    """Missing or invalid configuration (API keys, provider names)."""


class AnalysisError(Exception):
    """Base class for every failure that ends an item's analysis."""


class AcquisitionError(AnalysisError):
    """The image bytes could not be obtained."""


class FetchError(AcquisitionError):
    """The remote server answered with a non-success status."""

    def __init__(self, status: int, url: str):
        self.status = status
        self.url = url
        super().__init__(f"Failed to fetch image ({status})")


class NetworkError(AcquisitionError):
    """The remote server could not be reached at all (DNS, refused, CORS-class)."""


class ContentTypeError(AnalysisError):
    """The fetched resource is not declared as an image."""

    def __init__(self, content_type: Optional[str]):
        self.content_type = content_type
        super().__init__("URL does not point to a valid image")


class EncodingError(AnalysisError):
    """Raw bytes could not be turned into the payload sent for inference."""


class InferenceError(AnalysisError):
    """The inference service failed or returned an unusable result."""


def describe_failure(err: BaseException, source_kind: SourceKind = SourceKind.FILE) -> str:
    """Derive the message stored on an item that failed with `err`."""
    if isinstance(err, NetworkError):
        return CORS_MESSAGE
    message = str(err).strip()
    if isinstance(err, AnalysisError) and message:
        return message
    if source_kind is SourceKind.URL:
        return URL_FALLBACK_MESSAGE
    return FILE_FALLBACK_MESSAGE
