"""Parser for poetry.lock files (Python Poetry)."""

from typing import Any

from ...models import ModeFlags
from ..models import DependencySpec, LockContents, LockedPackage, package_tables


class PoetryLockParser:
    """Parser for poetry.lock files.

    poetry.lock is a TOML file with [[package]] sections:
    [[package]]
    name = "django"
    version = "4.2"
    groups = ["main"]          # Poetry 2; older locks use category = "main"

    [package.dependencies]
    asgiref = ">=3.6.0,<4"
    tzdata = {version = "*", markers = "sys_platform == \\"win32\\""}
    """

    name = "poetry-lock"
    supported_files = ("poetry.lock",)
    modes = ModeFlags(poetry_mode=True)

    def supports(self, lock_file_name: str) -> bool:
        return lock_file_name in self.supported_files

    def sniff(self, data: dict[str, Any]) -> bool:
        metadata = data.get("metadata")
        if not isinstance(metadata, dict):
            return False
        return "lock-version" in metadata or ("content-hash" in metadata and "lock_version" not in metadata)

    def parse(self, data: dict[str, Any]) -> LockContents:
        packages: list[LockedPackage] = []

        for pkg in package_tables(data):
            name = pkg.get("name")
            if not name:
                continue

            groups = pkg.get("groups")
            if not groups and pkg.get("category"):
                groups = [pkg["category"]]

            dependencies = []
            deps = pkg.get("dependencies", {})
            if isinstance(deps, dict):
                dependencies = [DependencySpec(name=dep_name) for dep_name in deps]

            packages.append(
                LockedPackage(
                    name=name,
                    version=str(pkg.get("version", "")),
                    groups=tuple(sorted(set(groups or ()))),
                    dependencies=dependencies,
                )
            )

        return LockContents(format=self.name, packages=packages)
