"""
Process-wide logging for the localization filter.

Modules never configure handlers themselves; they ask for a named logger:

    from mcl.utils.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Initialized %d particles", num_particles)

The first ``get_logger`` call installs the handlers. Two environment
variables are read at that point:

    LOG_LEVEL   DEBUG / INFO / WARNING / ERROR (default INFO); DEBUG shows
                per-step filter diagnostics such as max weight and ESS
    LOG_FILE    if set, records are also appended to this file
"""

import logging
import os
import sys
from typing import Optional


DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that flood INFO with graph/device messages
_NOISY_LOGGERS = ("tensorflow", "absl")

_configured = False


def _to_level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def _make_handler(handler: logging.Handler, level: int,
                  formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Install console (and optionally file) handlers on the root logger.

    Only the first call has an effect.

    Parameters
    ----------
    level : str, optional
        Level name; falls back to ``$LOG_LEVEL`` and then INFO.
    log_file : str, optional
        File to append records to; falls back to ``$LOG_FILE``. Parent
        directories are created as needed.
    format_string : str, optional
        Record format; DEFAULT_FORMAT when omitted.
    """
    global _configured

    if _configured:
        return

    numeric_level = _to_level(level or os.environ.get("LOG_LEVEL", "INFO"))
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT,
                                  datefmt=DEFAULT_DATE_FORMAT)

    handlers = [_make_handler(logging.StreamHandler(sys.stdout),
                              numeric_level, formatter)]

    log_file = log_file or os.environ.get("LOG_FILE")
    if log_file:
        parent = os.path.dirname(log_file)
        if parent:
            os.makedirs(parent, exist_ok=True)
        handlers.append(_make_handler(logging.FileHandler(log_file),
                                      numeric_level, formatter))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(numeric_level)
    for handler in handlers:
        root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Named logger; installs the handlers on first use."""
    if not _configured:
        setup_logging()
    return logging.getLogger(name)


def set_level(level: str) -> None:
    """Change verbosity at runtime, e.g. ``set_level("DEBUG")`` while debugging weights."""
    numeric_level = _to_level(level)
    root = logging.getLogger()
    root.setLevel(numeric_level)
    for handler in root.handlers:
        handler.setLevel(numeric_level)
