"""
Configuration

Module-level defaults with environment overrides:
- SHA2VECTORS_DIR: directory holding the .rsp vector files
- SHA2VECTORS_LOG_LEVEL: log level name (DEBUG, INFO, WARNING, ...)
"""

import os
from pathlib import Path


# ============================================================================
# Constants
# ============================================================================

VECTORS_DIR_ENV = "SHA2VECTORS_DIR"
LOG_LEVEL_ENV = "SHA2VECTORS_LOG_LEVEL"

DEFAULT_VECTORS_DIR = Path("tests") / "vectors"  # Relative to the working directory
DEFAULT_LOG_LEVEL = "WARNING"

CHUNKED_MAX_BITS = 128  # Byte-by-byte streaming only for short messages
UNEVEN_CHUNKS_MIN_BITS = 24  # Three-way split needs at least 3 bytes
STREAM_CHUNK_SIZE = 65536  # Read size when hashing files from the CLI
DEFAULT_WORKERS = 1


def vectors_dir() -> Path:
    """Directory that vector file base names are resolved against."""
    override = os.environ.get(VECTORS_DIR_ENV)
    if override:
        return Path(override)
    return Path.cwd() / DEFAULT_VECTORS_DIR


def log_level() -> str:
    """Configured log level name."""
    return os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
