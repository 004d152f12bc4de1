"""Lock file and manifest parsing.

Turns raw poetry.lock, pdm.lock, uv.lock and uv-workspace.lock text, plus an
optional pyproject.toml, into a normalized ``LockBundle``.

Example usage:
    from pylock_inspect._parsing import parse_py_lock_data

    bundle = parse_py_lock_data(Path("uv.lock").read_text(), "uv.lock", "pyproject.toml")
    print(f"{len(bundle.pkg_list)} packages")
"""

from .lockfile import create_default_registry, load_bundle_file, parse_py_lock_data, parse_py_lock_file
from .models import normalize_python_package_name, requirement_name
from .protocol import LockfileParser
from .pyproject import parse_pyproject_data, parse_pyproject_toml_file
from .registry import ParserRegistry

__all__ = [
    # Main API
    "parse_py_lock_data",
    "parse_py_lock_file",
    "parse_pyproject_toml_file",
    "parse_pyproject_data",
    "load_bundle_file",
    # Classes for advanced usage
    "ParserRegistry",
    "LockfileParser",
    "create_default_registry",
    # Helpers
    "normalize_python_package_name",
    "requirement_name",
]
