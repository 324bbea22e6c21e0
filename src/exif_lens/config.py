"""
config.py: Runtime settings.

API keys are read from the environment by each client. Everything else has a
default here, can be overridden with EXIF_LENS_* variables and finally by CLI
flags.
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from .core.errors import ConfigError
from .utils.log_utils import LOG_LEVELS

ENV_PREFIX = "EXIF_LENS_"
IMAGE_SIZES = [256, 512, 768, 1024]


def _optional_int(value: str) -> Optional[int]:
    return int(value) if value and value.lower() != "none" else None


def _optional_float(value: str) -> Optional[float]:
    return float(value) if value and value.lower() != "none" else None


def _flag(value: str) -> bool:
    return value.lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    provider: str = "gemini"
    model: Optional[str] = None
    max_image_size: Optional[int] = None
    fetch_timeout: Optional[float] = 30.0
    host: str = "127.0.0.1"
    port: int = 3000
    demo: bool = False
    log_level: str = "info"

    def __post_init__(self) -> None:
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level {self.log_level!r}; expected one of {', '.join(LOG_LEVELS)}"
            )

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        environ = os.environ if environ is None else environ
        parsers = {
            "provider": str.lower,
            "model": str,
            "max_image_size": _optional_int,
            "fetch_timeout": _optional_float,
            "host": str,
            "port": int,
            "demo": _flag,
            "log_level": str.lower,
        }
        values = {}
        for field in fields(cls):
            raw = environ.get(ENV_PREFIX + field.name.upper())
            if raw is None:
                continue
            try:
                values[field.name] = parsers[field.name](raw)
            except ValueError as err:
                raise ConfigError(f"Invalid {ENV_PREFIX}{field.name.upper()}={raw!r}") from err
        return cls(**values)

    def override(self, **changes: Any) -> "Settings":
        """Apply CLI values, ignoring the ones that were not given."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def client_kwargs(self) -> dict:
        return {"model": self.model} if self.model else {}
