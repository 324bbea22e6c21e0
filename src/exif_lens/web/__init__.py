"""
Flask web interface for the gallery.
"""

from .app import create_app

__all__ = ["create_app"]
