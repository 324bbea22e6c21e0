"""
Vision inference integrations.

A unified client interface over Gemini, OpenAI and Claude that turns an encoded
image into camera metadata.
"""

from .base import InferenceClient, parse_metadata
from .clients import ClaudeClient, GeminiClient, OpenAIClient, get_client, CLIENTS
from .prompt import EXIF_SCHEMA, PROMPT_TEMPLATE

__all__ = [
    "InferenceClient",
    "parse_metadata",
    "GeminiClient",
    "OpenAIClient",
    "ClaudeClient",
    "get_client",
    "CLIENTS",
    "EXIF_SCHEMA",
    "PROMPT_TEMPLATE",
]
