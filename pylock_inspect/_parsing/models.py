"""Intermediate data models produced by lock file parsers."""

import re
from dataclasses import dataclass, field
from typing import Any, Optional

from packageurl import PackageURL

# Leading distribution name of a PEP 508 requirement string
_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?)")


@dataclass
class DependencySpec:
    """A dependency as written in the lock file.

    ``version`` is only set when the lock pins which of several locked
    versions is meant (uv does this for duplicate names).
    """

    name: str
    version: Optional[str] = None


@dataclass
class LockedPackage:
    """One ``[[package]]`` entry of a lock file."""

    name: str
    version: str
    groups: tuple[str, ...] = ()
    dependencies: list[DependencySpec] = field(default_factory=list)
    is_project: bool = False
    workspace_member: bool = False


@dataclass
class LockContents:
    """Everything a parser extracted from one lock file."""

    format: str
    packages: list[LockedPackage] = field(default_factory=list)
    workspace_members: tuple[str, ...] = ()


def normalize_python_package_name(name: str) -> str:
    """Normalize Python package name per PEP 503.

    PEP 503: Package names are case-insensitive and treat runs of
    hyphens, underscores, and dots as equivalent.
    """
    return re.sub(r"[-_.]+", "-", name).lower()


def requirement_name(requirement: str) -> Optional[str]:
    """Extract the distribution name from a PEP 508 requirement string.

    Examples:
        >>> requirement_name("django[argon2]>=4.2 ; python_version >= '3.10'")
        'django'
        >>> requirement_name("  ") is None
        True
    """
    match = _REQUIREMENT_NAME.match(requirement)
    return match.group(1) if match else None


def make_pypi_purl(name: str, version: Optional[str]) -> str:
    """Construct a PURL for a PyPI package.

    PyPI purl names are lowercase with underscores replaced by dashes.
    """
    purl = PackageURL(
        type="pypi",
        name=name.lower().replace("_", "-"),
        version=version or None,
    )
    return purl.to_string()


def package_tables(data: dict[str, Any]) -> list[dict[str, Any]]:
    """The ``[[package]]`` array of a decoded lock file.

    Raises:
        ValueError: If ``package`` is not an array of tables.
    """
    packages = data.get("package", [])
    if not isinstance(packages, list) or not all(isinstance(pkg, dict) for pkg in packages):
        raise ValueError("'package' must be an array of tables")
    return packages
