"""Assemble a normalized ``LockBundle`` from lock file text and an optional manifest."""

import json
from pathlib import Path
from typing import Optional, Union

import tomllib

from ..exceptions import FileProcessingError, InputNotFoundError
from ..logging_config import logger
from ..models import Component, ComponentKind, DependencyEdgeSet, LockBundle, ModeFlags, ParentComponent
from .models import DependencySpec, LockContents, LockedPackage, make_pypi_purl, normalize_python_package_name
from .parsers import PdmLockParser, PoetryLockParser, UvLockParser
from .pyproject import parse_pyproject_toml_file
from .registry import ParserRegistry


def create_default_registry() -> ParserRegistry:
    """Create a registry with all built-in lock file parsers.

    Registration order is also the content-sniffing order.
    """
    registry = ParserRegistry()
    registry.register(PoetryLockParser())
    registry.register(PdmLockParser())
    registry.register(UvLockParser())
    return registry


class _BundleBuilder:
    """Turns parser output into components, edges and roots keyed by identifier."""

    def __init__(self, contents: LockContents, manifest: Optional[LockBundle]) -> None:
        self.contents = contents
        self.manifest = manifest or LockBundle()
        self.components: dict[str, Component] = {}
        self.dependencies: dict[str, list[DependencySpec]] = {}
        # normalized name -> [(version, ref)] in lock order
        self.by_name: dict[str, list[tuple[str, str]]] = {}
        self.project: Optional[LockedPackage] = None

    def build(self, parser_modes: ModeFlags, lock_file: str) -> LockBundle:
        for pkg in self.contents.packages:
            if pkg.is_project and self.project is None:
                self.project = pkg
                continue
            self._add_package(pkg)

        parent = self._parent_component()
        edges = self._edges()
        roots = self._roots(edges)

        dependencies_list = [DependencyEdgeSet(ref=ref, depends_on=tuple(edges[ref])) for ref in self.components]
        if parent is not None and parent.bom_ref not in self.components:
            dependencies_list.insert(0, DependencyEdgeSet(ref=parent.bom_ref, depends_on=tuple(roots)))

        return LockBundle(
            parent_component=parent,
            pkg_list=tuple(self.components.values()),
            dependencies_list=tuple(dependencies_list),
            root_list=tuple(roots),
            direct_deps_keys=self.manifest.direct_deps_keys,
            group_deps_keys=self.manifest.group_deps_keys,
            workspace_paths=self.manifest.workspace_paths,
            modes=self.manifest.modes.merge(parser_modes),
            lock_file=lock_file,
            pyproject_file=self.manifest.pyproject_file,
        )

    def _add_package(self, pkg: LockedPackage) -> None:
        ref = make_pypi_purl(pkg.name, pkg.version)
        workspace_member = pkg.workspace_member or pkg.name in self.contents.workspace_members

        existing = self.components.get(ref)
        if existing is not None:
            # Same package locked again (e.g. pdm extras); fold it into the first entry
            self.components[ref] = Component(
                name=existing.name,
                version=existing.version,
                bom_ref=ref,
                purl=ref,
                groups=tuple(sorted(set(existing.groups) | set(pkg.groups))),
                workspace_member=existing.workspace_member or workspace_member,
            )
            self.dependencies[ref].extend(pkg.dependencies)
            return

        self.components[ref] = Component(
            name=pkg.name,
            version=pkg.version,
            bom_ref=ref,
            purl=ref,
            groups=pkg.groups,
            workspace_member=workspace_member,
        )
        self.dependencies[ref] = list(pkg.dependencies)
        self.by_name.setdefault(normalize_python_package_name(pkg.name), []).append((pkg.version, ref))

    def _resolve(self, spec: DependencySpec) -> Optional[str]:
        candidates = self.by_name.get(normalize_python_package_name(spec.name), [])
        if not candidates:
            return None
        if spec.version:
            for version, ref in candidates:
                if version == spec.version:
                    return ref
        return candidates[0][1]

    def _parent_component(self) -> Optional[ParentComponent]:
        if self.manifest.parent_component is not None:
            return self.manifest.parent_component
        if self.project is None:
            return None
        purl = make_pypi_purl(self.project.name, self.project.version)
        return ParentComponent(
            name=self.project.name,
            version=self.project.version,
            bom_ref=purl,
            purl=purl,
            type=ComponentKind.APPLICATION.value,
        )

    def _edges(self) -> dict[str, list[str]]:
        edges: dict[str, list[str]] = {}
        for ref, specs in self.dependencies.items():
            targets = set()
            for spec in specs:
                target = self._resolve(spec)
                if target is None:
                    logger.debug(f"{ref}: dependency {spec.name!r} is not locked, skipping")
                elif target != ref:
                    targets.add(target)
            edges[ref] = sorted(targets)
        return edges

    def _declared_names(self) -> set[str]:
        names = set(self.manifest.direct_deps_keys) | set(self.manifest.group_deps_keys)
        names |= set(self.contents.workspace_members)
        return {normalize_python_package_name(name) for name in names}

    def _roots(self, edges: dict[str, list[str]]) -> list[str]:
        if self.project is not None:
            # uv records exactly which locked version the project depends on
            project_refs = {ref for ref in map(self._resolve, self.project.dependencies) if ref}
            return [
                ref for ref, component in self.components.items() if ref in project_refs or component.workspace_member
            ]

        declared = self._declared_names()
        if declared:
            return [
                ref
                for ref, component in self.components.items()
                if component.workspace_member or normalize_python_package_name(component.name) in declared
            ]

        # Nothing declared: roots are the packages nobody depends on
        depended_on = {target for targets in edges.values() for target in targets}
        return [ref for ref in self.components if ref not in depended_on]


def parse_py_lock_data(
    lock_data: str,
    lock_file: Union[str, Path],
    pyproject_file: Optional[Union[str, Path]] = None,
) -> LockBundle:
    """
    Parse Python lock file text into a normalized bundle.

    Args:
        lock_data: Raw lock file text (poetry.lock, pdm.lock, uv.lock, uv-workspace.lock)
        lock_file: Originating path; its file name selects the parser
        pyproject_file: Optional pyproject.toml supplying the project identity
            and the declared direct/group dependencies

    Returns:
        LockBundle

    Raises:
        InputNotFoundError: If pyproject_file is given but missing
        FileProcessingError: If the text is not TOML, the format is unknown, or
            the package array has the wrong shape
    """
    manifest = parse_pyproject_toml_file(pyproject_file) if pyproject_file else None

    lock_path = Path(lock_file)
    try:
        data = tomllib.loads(lock_data)
    except tomllib.TOMLDecodeError as e:
        raise FileProcessingError(f"Failed to parse {lock_path}: {e}") from e

    parser = create_default_registry().select(lock_path.name, data)
    if parser is None:
        raise FileProcessingError(f"Unsupported lock file format: {lock_path.name}")

    logger.info(f"Parsing {lock_path.name} with {parser.name}")
    try:
        contents = parser.parse(data)
    except ValueError as e:
        raise FileProcessingError(f"Invalid {lock_path.name}: {e}") from e
    bundle = _BundleBuilder(contents, manifest).build(parser.modes, str(lock_file))

    logger.info(
        f"Parsed {len(bundle.pkg_list)} package(s), {len(bundle.root_list)} root(s) from {lock_path.name}"
    )
    return bundle


def parse_py_lock_file(
    lock_file: Union[str, Path],
    pyproject_file: Optional[Union[str, Path]] = None,
) -> LockBundle:
    """Read a lock file from disk and parse it (see ``parse_py_lock_data``).

    Raises:
        InputNotFoundError: If the lock file is missing
        FileProcessingError: If the file cannot be read as UTF-8 text
    """
    path = Path(lock_file)
    if not path.is_file():
        raise InputNotFoundError(path, label="Lock file")
    try:
        lock_data = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise FileProcessingError(f"Failed to parse {path}: {e}") from e
    except OSError as e:
        raise FileProcessingError(f"Failed to read {path}: {e}") from e
    return parse_py_lock_data(lock_data, path, pyproject_file)


def load_bundle_file(bundle_file: Union[str, Path]) -> LockBundle:
    """
    Load a bundle previously exported as JSON.

    Raises:
        InputNotFoundError: If the file is missing
        FileProcessingError: If the file is not UTF-8 JSON or not a bundle object
    """
    path = Path(bundle_file)
    if not path.is_file():
        raise InputNotFoundError(path, label="Bundle file")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise FileProcessingError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise FileProcessingError(f"Failed to read {path}: {e}") from e

    if data is not None and not isinstance(data, dict):
        raise FileProcessingError(f"Expected a JSON object in {path}, got {type(data).__name__}")

    try:
        return LockBundle.from_dict(data, lock_file=str(path))
    except ValueError as e:
        raise FileProcessingError(f"Invalid bundle in {path}: {e}") from e
