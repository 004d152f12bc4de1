"""Lock file parsers for Python package managers."""

from .pdm_lock import PdmLockParser
from .poetry_lock import PoetryLockParser
from .uv_lock import UvLockParser

__all__ = [
    "PdmLockParser",
    "PoetryLockParser",
    "UvLockParser",
]
