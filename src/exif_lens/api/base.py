"""
Base functionality for image analysis clients.

Every provider implements `_call_api`; parsing and validation of the returned
metadata is shared here so that every provider fails the same way.
"""

import json
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from pydantic import ValidationError

from ..core.errors import InferenceError
from ..core.models import ExifMetadata
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


class InferenceClient(ABC):
    """Abstract base class for vision inference clients."""

    provider = "unknown"

    def __init__(self, api_key: Optional[str] = None):
        """Initialize the client.

        Args:
            api_key: API key for the service. If None, will try to get from environment.
        """
        self.api_key = api_key
        self._validate_api_key()

    @abstractmethod
    def _validate_api_key(self) -> None:
        """Validate that the API key is available and set up the SDK client."""

    @abstractmethod
    def _get_model_name(self) -> str:
        """Return the model name used for this API."""

    @abstractmethod
    def _call_api(self, image_b64: str, content_type: str) -> Tuple[str, Dict[str, int]]:
        """Make the actual API call and return the response text and token usage.

        Args:
            image_b64: Base64-encoded image data
            content_type: MIME type of the encoded image

        Returns:
            Tuple of (response_text, token_usage_dict)
        """

    @property
    def model_name(self) -> str:
        return self._get_model_name()

    def analyze_image(self, image_b64: str, content_type: str) -> ExifMetadata:
        """Analyze an image and return its metadata.

        Raises:
            InferenceError: If the call fails or the response is empty or not
                a complete metadata object.
        """
        try:
            response_text, token_usage = self._call_api(image_b64, content_type)
        except InferenceError:
            raise
        except Exception as err:
            logger.error("%s API request failed: %s", self.provider, err)
            raise InferenceError(f"{self.provider} API error: {err}") from err

        if token_usage:
            logger.debug("%s token usage: %s", self._get_model_name(), token_usage)
        return parse_metadata(response_text, self.provider)


def parse_metadata(response_text: Optional[str], provider: str = "inference") -> ExifMetadata:
    """Parse a JSON response into ExifMetadata; no partial results are accepted."""
    if not response_text or not response_text.strip():
        raise InferenceError(f"Empty response from {provider}")
    try:
        payload = json.loads(response_text)
    except json.JSONDecodeError as err:
        logger.error("Failed to parse JSON response: %s", response_text)
        raise InferenceError(f"Invalid JSON response from {provider}") from err
    if not isinstance(payload, dict):
        raise InferenceError(f"Unexpected response shape from {provider}")
    try:
        return ExifMetadata.model_validate(payload)
    except ValidationError as err:
        logger.error("Incomplete metadata from %s: %s", provider, err)
        raise InferenceError(f"Incomplete metadata from {provider}") from err
