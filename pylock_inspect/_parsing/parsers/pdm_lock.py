"""Parser for pdm.lock files (Python PDM)."""

from typing import Any

from ...logging_config import logger
from ...models import ModeFlags
from ..models import DependencySpec, LockContents, LockedPackage, package_tables, requirement_name


class PdmLockParser:
    """Parser for pdm.lock files.

    pdm.lock lists dependencies as PEP 508 requirement strings:
    [[package]]
    name = "django"
    version = "4.2"
    groups = ["default"]
    dependencies = ["asgiref<4,>=3.6.0", "tzdata; sys_platform == \\"win32\\""]

    Packages locked with extras appear again under the same name and version
    with an ``extras`` key; the bundle builder merges such repeats.
    """

    name = "pdm-lock"
    supported_files = ("pdm.lock",)
    modes = ModeFlags()

    def supports(self, lock_file_name: str) -> bool:
        return lock_file_name in self.supported_files

    def sniff(self, data: dict[str, Any]) -> bool:
        metadata = data.get("metadata")
        return isinstance(metadata, dict) and "lock_version" in metadata

    def parse(self, data: dict[str, Any]) -> LockContents:
        packages: list[LockedPackage] = []

        for pkg in package_tables(data):
            name = pkg.get("name")
            if not name:
                continue

            requirements = pkg.get("dependencies", [])
            dependencies = []
            for requirement in requirements if isinstance(requirements, list) else ():
                dep_name = requirement_name(requirement) if isinstance(requirement, str) else None
                if dep_name is None:
                    logger.debug(f"Skipping unparseable requirement {requirement!r} of {name}")
                    continue
                dependencies.append(DependencySpec(name=dep_name))

            packages.append(
                LockedPackage(
                    name=name,
                    version=str(pkg.get("version", "")),
                    groups=tuple(sorted(set(pkg.get("groups") or ()))),
                    dependencies=dependencies,
                )
            )

        return LockContents(format=self.name, packages=packages)
