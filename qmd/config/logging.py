"""Logging setup.

Everything goes to stderr: stdout belongs to whatever transport drives
the knowledge base.
"""
import logging
import sys

from .settings import Settings

# Settings field -> logger names it controls
_CATEGORY_MAP: dict[str, list[str]] = {
    "log_level_http": ["httpx", "httpcore", "openai"],
}


def configure_logging(settings: Settings) -> None:
    """Install a stderr handler and apply per-category levels.

    Args:
        settings: Application settings.
    """
    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))

    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)-8s %(name)s: %(message)s"))
        root.addHandler(handler)

    for field_name, logger_names in _CATEGORY_MAP.items():
        level = _parse_level(getattr(settings, field_name, "INFO"))
        for name in logger_names:
            logging.getLogger(name).setLevel(level)


def _parse_level(raw: str) -> int:
    numeric = getattr(logging, raw.upper(), None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO
