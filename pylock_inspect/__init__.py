"""pylock-inspect: normalized, queryable dependency graphs for Python lock files."""

from importlib.metadata import PackageNotFoundError, version


def _get_version() -> str:
    """Get package version, falling back to "unknown" when not installed."""
    try:
        return version("pylock-inspect")
    except PackageNotFoundError:
        return "unknown"


__version__ = _get_version()
