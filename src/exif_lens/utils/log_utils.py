import logging
from rich.logging import RichHandler

LOG_LEVELS = ["debug", "info", "warning", "error", "critical", "none"]


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure the root logger with a Rich handler.
    """
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)]
    )


def configure_from_name(level_name: str) -> None:
    """
    Configure logging from a CLI level name; 'none' leaves logging unconfigured.
    """
    if level_name.lower() != "none":
        configure_logging(getattr(logging, level_name.upper()))


def get_logger(name: str) -> logging.Logger:
    """
    Return a named logger (after logging is configured).
    """
    return logging.getLogger(name)
