"""Parser for uv.lock and uv-workspace.lock files (Python uv package manager)."""

from typing import Any

from ...models import ModeFlags
from ..models import DependencySpec, LockContents, LockedPackage, package_tables

# Source kinds that point at local project trees rather than a registry
LOCAL_SOURCE_KINDS = ("editable", "virtual")


class UvLockParser:
    """Parser for uv.lock files.

    uv.lock is a TOML file with [[package]] sections containing:
    - name, version, source = { registry = ... } or { editable = "." } ...
    - dependencies = [{ name = "...", version = "..." (only for duplicates) }]
    - [package.optional-dependencies] and [package.dev-dependencies] tables
      of the same inline-table lists

    The package whose source is the project directory itself is the project.
    Other local packages are workspace members, as are the names listed in
    ``[manifest] members``.
    """

    name = "uv-lock"
    supported_files = ("uv.lock", "uv-workspace.lock")
    modes = ModeFlags(uv_mode=True)

    def supports(self, lock_file_name: str) -> bool:
        return lock_file_name in self.supported_files

    def sniff(self, data: dict[str, Any]) -> bool:
        return isinstance(data.get("version"), int) and "requires-python" in data

    def parse(self, data: dict[str, Any]) -> LockContents:
        manifest = data.get("manifest", {})
        members = manifest.get("members", ()) if isinstance(manifest, dict) else ()
        members = tuple(str(m) for m in members) if isinstance(members, list) else ()

        packages: list[LockedPackage] = []
        for pkg in package_tables(data):
            name = pkg.get("name")
            if not name:
                continue

            local_path = self._local_source_path(pkg.get("source"))
            dependencies = self._collect_dependencies(pkg)

            packages.append(
                LockedPackage(
                    name=name,
                    version=str(pkg.get("version", "")),
                    dependencies=dependencies,
                    is_project=local_path == ".",
                    workspace_member=local_path is not None and local_path != ".",
                )
            )

        return LockContents(format=self.name, packages=packages, workspace_members=members)

    @staticmethod
    def _local_source_path(source: Any) -> str | None:
        if not isinstance(source, dict):
            return None
        for kind in LOCAL_SOURCE_KINDS:
            if kind in source:
                return str(source[kind])
        return None

    def _collect_dependencies(self, pkg: dict[str, Any]) -> list[DependencySpec]:
        entries = list(pkg.get("dependencies", []))
        for table_key in ("optional-dependencies", "dev-dependencies"):
            table = pkg.get(table_key, {})
            if isinstance(table, dict):
                for group_entries in table.values():
                    entries.extend(group_entries)

        dependencies = []
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("name"):
                continue
            version = entry.get("version")
            dependencies.append(DependencySpec(name=entry["name"], version=str(version) if version else None))
        return dependencies
