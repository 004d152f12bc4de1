"""CLI module for pylock-inspect.

This module provides the command-line interface. Input paths and the log
level can also be supplied through environment variables.
"""

from .main import (
    InspectConfig,
    cli,
    main,
    run_query,
)

__all__ = [
    "cli",
    "main",
    "InspectConfig",
    "run_query",
]
