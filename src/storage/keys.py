"""Object key generation and validation.

Keys double as file names under ``files/`` and as the stem of the metadata
sidecar, so every key must be a single, safe path segment.
"""
import time
from typing import Any

from src.core.exceptions import InvalidKeyError

_SEPARATORS = ("/", "\\")


def validate_key(key: Any) -> str:
    """Return ``key`` unchanged if it is a safe path segment.

    Raises:
        InvalidKeyError: empty, non-string, ``..``-bearing, separator-bearing
            or NUL-bearing keys.
    """
    if not isinstance(key, str) or not key or key == ".":
        raise InvalidKeyError(key)
    if ".." in key or "\x00" in key:
        raise InvalidKeyError(key)
    if any(sep in key for sep in _SEPARATORS):
        raise InvalidKeyError(key)
    return key


def sanitize_filename(filename: str | None) -> str:
    """Strip traversal sequences and separators from an uploaded filename."""
    name = (filename or "").replace("\x00", "").replace("..", "")
    for sep in _SEPARATORS:
        name = name.replace(sep, "_")
    return name or "file"


def generate_key(filename: str | None) -> str:
    """Build ``<ms-epoch>-<filename>``.

    Two uploads of the same filename within one millisecond get the same key;
    the later write wins.
    """
    return f"{int(time.time() * 1000)}-{sanitize_filename(filename)}"
