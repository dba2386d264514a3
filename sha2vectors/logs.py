"""
Logging Setup

structlog is configured once when the package is imported: WARNING and
above on stderr unless SHA2VECTORS_LOG_LEVEL says otherwise. Applications
that configure structlog themselves before importing sha2vectors keep
their own configuration.
"""

import logging
import sys
from typing import Optional

import structlog

from . import config


def _stderr_logger(*args) -> structlog.PrintLogger:
    # Looked up per call so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: Optional[str] = None) -> None:
    """Route structlog output to stderr, filtered at the given level."""
    level_name = (level or config.log_level()).upper()
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level_name, logging.WARNING)
        ),
        logger_factory=_stderr_logger,
    )


def configure_default_logging() -> None:
    """Apply configure_logging() unless structlog was configured already."""
    if not structlog.is_configured():
        configure_logging()
