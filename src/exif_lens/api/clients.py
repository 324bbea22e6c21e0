"""
Inference client implementations for the supported vision services.

All clients inherit from InferenceClient and request schema-constrained JSON
matching EXIF_SCHEMA.
"""

import base64
import json
import os
from typing import Dict, Optional, Tuple

import anthropic
import google.generativeai as genai
from openai import OpenAI

from ..core.errors import ConfigError
from ..utils.log_utils import get_logger
from .base import InferenceClient
from .prompt import EXIF_SCHEMA, PROMPT_TEMPLATE, SCHEMA_DATA, SYSTEM_PROMPT

logger = get_logger(__name__)

# Fields Gemini's response_schema does not accept.
GEMINI_UNSUPPORTED_FIELDS = {
    'additionalProperties', 'minimum', 'maximum', 'exclusiveMinimum',
    'exclusiveMaximum', 'multipleOf', 'minLength', 'maxLength',
    'pattern', 'minItems', 'maxItems', 'uniqueItems', 'const',
    'allOf', 'anyOf', 'oneOf', 'not', 'title', '$schema',
}


def remove_unsupported_fields(obj):
    """Recursively drop JSON schema keywords Gemini rejects."""
    if isinstance(obj, dict):
        return {
            k: remove_unsupported_fields(v)
            for k, v in obj.items()
            if k not in GEMINI_UNSUPPORTED_FIELDS
        }
    if isinstance(obj, list):
        return [remove_unsupported_fields(item) for item in obj]
    return obj


class GeminiClient(InferenceClient):
    """Client for Google's Gemini API."""

    provider = "gemini"

    def __init__(self, api_key: Optional[str] = None, model: str = "gemini-2.5-flash",
                 temperature: float = 0.4):
        """Initialize Gemini client.

        Args:
            api_key: Google API key. If None, uses GOOGLE_API_KEY or GEMINI_API_KEY.
            model: Model name to use (default: gemini-2.5-flash)
            temperature: Sampling temperature; kept low for analytical answers.
        """
        self.model = model
        self.temperature = temperature
        super().__init__(api_key)

    def _validate_api_key(self) -> None:
        key = self.api_key or os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
        if not key:
            raise ConfigError("GOOGLE_API_KEY environment variable not set")
        self.api_key = key
        genai.configure(api_key=key)

    def _get_model_name(self) -> str:
        return self.model

    def _call_api(self, image_b64: str, content_type: str) -> Tuple[str, Dict[str, int]]:
        model = genai.GenerativeModel(
            self.model,
            generation_config={
                "temperature": self.temperature,
                "candidate_count": 1,
                "response_mime_type": "application/json",
                "response_schema": remove_unsupported_fields(EXIF_SCHEMA),
            }
        )
        response = model.generate_content([
            {
                "mime_type": content_type,
                "data": base64.b64decode(image_b64)
            },
            PROMPT_TEMPLATE,
        ])

        usage = getattr(response, "usage_metadata", None)
        token_usage = {}
        if usage is not None:
            token_usage = {
                'input_tokens': getattr(usage, 'prompt_token_count', None),
                'output_tokens': getattr(usage, 'candidates_token_count', None),
                'total_tokens': getattr(usage, 'total_token_count', None)
            }
        return response.text, token_usage


class OpenAIClient(InferenceClient):
    """Client for OpenAI's vision-capable chat models."""

    provider = "openai"

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini"):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key. If None, uses OPENAI_API_KEY env var.
            model: Model name to use (default: gpt-4o-mini)
        """
        self.model = model
        super().__init__(api_key)

    def _validate_api_key(self) -> None:
        key = self.api_key or os.getenv("OPENAI_API_KEY")
        if not key:
            raise ConfigError("OPENAI_API_KEY environment variable not set")
        self.api_key = key
        self.client = OpenAI(api_key=key)

    def _get_model_name(self) -> str:
        return self.model

    def _call_api(self, image_b64: str, content_type: str) -> Tuple[str, Dict[str, int]]:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": PROMPT_TEMPLATE},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{content_type};base64,{image_b64}"}
                        }
                    ]
                }
            ],
            response_format={
                "type": "json_schema",
                "json_schema": SCHEMA_DATA
            }
        )

        usage = response.usage
        token_usage = {
            'input_tokens': getattr(usage, 'prompt_tokens', None),
            'output_tokens': getattr(usage, 'completion_tokens', None),
            'total_tokens': getattr(usage, 'total_tokens', None)
        }
        return response.choices[0].message.content, token_usage


class ClaudeClient(InferenceClient):
    """Client for Anthropic's Claude API, using a forced tool call for structured output."""

    provider = "claude"

    def __init__(self, api_key: Optional[str] = None, model: str = "claude-3-5-haiku-latest"):
        self.model = model
        super().__init__(api_key)

    def _validate_api_key(self) -> None:
        key = self.api_key or os.getenv("ANTHROPIC_API_KEY")
        if not key:
            raise ConfigError("ANTHROPIC_API_KEY environment variable not set")
        self.api_key = key
        self.client = anthropic.Anthropic(api_key=key)

    def _get_model_name(self) -> str:
        return self.model

    def _call_api(self, image_b64: str, content_type: str) -> Tuple[str, Dict[str, int]]:
        response = self.client.messages.create(
            model=self.model,
            max_tokens=512,
            temperature=0.4,
            system=SYSTEM_PROMPT,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": content_type,
                                "data": image_b64
                            }
                        },
                        {"type": "text", "text": PROMPT_TEMPLATE}
                    ]
                }
            ],
            tools=[
                {
                    "name": "exif_metadata",
                    "description": "Report the camera metadata of the image.",
                    "input_schema": EXIF_SCHEMA
                }
            ],
            tool_choice={"type": "tool", "name": "exif_metadata"}
        )

        result_json = ""
        for block in response.content:
            if block.type == "tool_use":
                result_json = json.dumps(block.input)
                break

        usage = response.usage
        token_usage = {
            'input_tokens': usage.input_tokens,
            'output_tokens': usage.output_tokens,
            'total_tokens': usage.input_tokens + usage.output_tokens
        }
        return result_json, token_usage


CLIENTS = {
    "gemini": GeminiClient,
    "openai": OpenAIClient,
    "claude": ClaudeClient,
}


def get_client(api_name: str, **kwargs) -> InferenceClient:
    """Factory function to create inference client instances.

    Args:
        api_name: Name of the API ('gemini', 'openai', 'claude')
        **kwargs: Additional arguments passed to the client constructor
    """
    try:
        client_cls = CLIENTS[api_name.lower()]
    except KeyError:
        raise ConfigError(f"Unsupported API: {api_name}") from None
    return client_cls(**{k: v for k, v in kwargs.items() if v is not None})
