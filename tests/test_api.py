import json
from unittest.mock import MagicMock, patch

import pytest

from exif_lens.api import CLIENTS, GeminiClient, InferenceClient, get_client, parse_metadata
from exif_lens.api.clients import remove_unsupported_fields
from exif_lens.api.prompt import EXIF_SCHEMA, REQUIRED_FIELDS
from exif_lens.core.errors import ConfigError, InferenceError

from conftest import make_metadata


class StaticClient(InferenceClient):
    provider = "static"

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        super().__init__("key")

    def _validate_api_key(self):
        pass

    def _get_model_name(self):
        return "static-1"

    def _call_api(self, image_b64, content_type):
        if self.error:
            raise self.error
        return self.response, {"input_tokens": 1, "output_tokens": 1, "total_tokens": 2}


class TestParseMetadata:
    def test_valid_response(self):
        payload = make_metadata().to_export()
        assert parse_metadata(json.dumps(payload)) == make_metadata()

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_response(self, text):
        with pytest.raises(InferenceError, match="Empty response"):
            parse_metadata(text, "gemini")

    def test_invalid_json(self):
        with pytest.raises(InferenceError, match="Invalid JSON"):
            parse_metadata("{not json")

    def test_partial_result_is_rejected(self):
        with pytest.raises(InferenceError, match="Incomplete metadata"):
            parse_metadata(json.dumps({"camera": "Nikon Z6"}))

    def test_non_object_is_rejected(self):
        with pytest.raises(InferenceError):
            parse_metadata("[1, 2]")


class TestInferenceClient:
    def test_analyze_image_returns_metadata(self):
        client = StaticClient(response=json.dumps(make_metadata().to_export()))
        assert client.analyze_image("aGk=", "image/png").camera == "Sony A7 IV"
        assert client.model_name == "static-1"

    def test_sdk_errors_become_inference_errors(self):
        client = StaticClient(error=RuntimeError("quota exceeded"))
        with pytest.raises(InferenceError, match="static API error: quota exceeded"):
            client.analyze_image("aGk=", "image/png")


class TestGetClient:
    def test_unknown_provider(self):
        with pytest.raises(ConfigError):
            get_client("dall-e")

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(ConfigError):
            get_client("gemini")

    def test_gemini_reads_key_from_env(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv("GEMINI_API_KEY", "secret")
        with patch("exif_lens.api.clients.genai") as genai:
            client = get_client("Gemini", model="gemini-2.5-pro")
        genai.configure.assert_called_with(api_key="secret")
        assert isinstance(client, GeminiClient)
        assert client.model_name == "gemini-2.5-pro"

    def test_gemini_requests_schema_output(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "secret")
        with patch("exif_lens.api.clients.genai") as genai:
            model = MagicMock()
            model.generate_content.return_value.text = json.dumps(make_metadata().to_export())
            genai.GenerativeModel.return_value = model
            result = get_client("gemini").analyze_image("aGk=", "image/webp")

        assert result == make_metadata()
        config = genai.GenerativeModel.call_args.kwargs["generation_config"]
        assert config["response_mime_type"] == "application/json"
        assert "additionalProperties" not in config["response_schema"]
        parts = model.generate_content.call_args.args[0]
        assert parts[0] == {"mime_type": "image/webp", "data": b"hi"}

    def test_registered_providers(self):
        assert sorted(CLIENTS) == ["claude", "gemini", "openai"]


class TestSchema:
    def test_all_fields_required(self):
        assert EXIF_SCHEMA["required"] == REQUIRED_FIELDS
        assert len(REQUIRED_FIELDS) == 7

    def test_remove_unsupported_fields_is_recursive(self):
        cleaned = remove_unsupported_fields({"a": {"title": "x", "type": "string"}, "additionalProperties": False})
        assert cleaned == {"a": {"type": "string"}}
