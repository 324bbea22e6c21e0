#!/usr/bin/env python3
"""
test_apis.py - Smoke test of the inference providers against a real image

Runs every provider whose API key is set and prints the metadata it infers.

Usage:
    python scripts/test_apis.py path/to/image.jpg [--model PROVIDER]
"""

import argparse
import os
import sys
import time
from pathlib import Path

from exif_lens.api import get_client
from exif_lens.cli import load_upload
from exif_lens.core.errors import AnalysisError, ConfigError
from exif_lens.core.image_encoder import encode_image

APIS = {
    'gemini': {'key': ('GOOGLE_API_KEY', 'GEMINI_API_KEY'), 'model': 'Gemini 2.5 Flash'},
    'openai': {'key': ('OPENAI_API_KEY',), 'model': 'GPT-4o mini'},
    'claude': {'key': ('ANTHROPIC_API_KEY',), 'model': 'Claude Haiku'},
}


def main():
    parser = argparse.ArgumentParser(description="Compare providers on one image")
    parser.add_argument("image")
    parser.add_argument("--model", choices=sorted(APIS), help="Test a single provider (default: all)")
    args = parser.parse_args()

    path = Path(args.image)
    if not path.is_file():
        print(f"Image file not found: {path}")
        sys.exit(1)

    upload = load_upload(path)
    encoded = encode_image(upload.data, upload.content_type)

    for api_name, config in APIS.items():
        if args.model and api_name != args.model:
            continue
        if not any(os.getenv(key) for key in config['key']):
            print(f"{' / '.join(config['key'])} not set - skipping {config['model']}")
            continue

        start_time = time.time()
        try:
            meta = get_client(api_name).analyze_image(encoded.data, encoded.content_type)
        except (AnalysisError, ConfigError) as err:
            print(f"{config['model']} failed: {err}")
            continue
        print(f"{config['model']} ({time.time() - start_time:.2f}s):")
        print(f"  {meta.camera} | {meta.lens} | {meta.aperture} | {meta.shutter_speed} | {meta.iso} | {meta.focal_length}")
        print(f"  {meta.description}")


if __name__ == "__main__":
    main()
