"""
Prompt and output schema for camera metadata extraction.
"""

from typing import Any, Dict

PROMPT_TEMPLATE = (
    "Analyze this image. Extract any readable EXIF metadata. If EXIF is stripped or unavailable, "
    "use your vision capabilities to infer the likely camera settings, gear, and techniques used "
    "to achieve this shot. Be precise and professional."
)

SYSTEM_PROMPT = "You are a photography expert who reports camera metadata as strict JSON."

_FIELDS = {
    "camera": "Camera body model (e.g., Canon EOS R5, Sony A7IV). If unknown, estimate based on image quality/resolution.",
    "lens": "Lens model (e.g., 24-70mm f/2.8). If unknown, estimate focal length class.",
    "aperture": "Aperture value (e.g., f/1.8). Estimate based on depth of field.",
    "shutterSpeed": "Shutter speed (e.g., 1/200s). Estimate based on motion blur or lack thereof.",
    "iso": "ISO value (e.g., ISO 100). Estimate based on noise levels.",
    "focalLength": "Focal length (e.g., 50mm). Estimate based on field of view and compression.",
    "description": "A brief, 1-sentence analysis of the photography technique used.",
}

REQUIRED_FIELDS = list(_FIELDS)

EXIF_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        name: {"type": "string", "description": description}
        for name, description in _FIELDS.items()
    },
    "required": REQUIRED_FIELDS,
    "additionalProperties": False,
}

# Wrapper used by OpenAI's json_schema response format.
SCHEMA_DATA: Dict[str, Any] = {
    "name": "exif_metadata",
    "strict": True,
    "schema": EXIF_SCHEMA,
}
