#!/usr/bin/env python3
"""
Runner script for ExifAI Lens.
This makes it easy to run the tool with uv: uv run python scripts/run.py serve --demo
"""

import sys

from exif_lens.cli import main

if __name__ == "__main__":
    sys.exit(main())
