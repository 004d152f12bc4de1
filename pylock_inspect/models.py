"""Data models for the normalized dependency graph.

A ``LockBundle`` is produced once per run by the parser and never mutated
afterwards. The JSON form (``to_dict``/``from_dict``) uses the camelCase keys
downstream SBOM tooling exchanges (``pkgList``, ``dependenciesList``,
``bom-ref``, ``dependsOn`` ...).
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


class ComponentKind(Enum):
    """Whether a component is the project itself or one of its dependencies."""

    APPLICATION = "application"
    LIBRARY = "library"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "ComponentKind":
        """Parse a component type string, defaulting to LIBRARY."""
        if value == cls.APPLICATION.value:
            return cls.APPLICATION
        return cls.LIBRARY


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _unique(items) -> Tuple[str, ...]:
    """Drop duplicates while keeping first-seen order."""
    return tuple(dict.fromkeys(items))


def _expect(value: Any, kind: type, what: str) -> Any:
    """Return ``value`` (or an empty ``kind`` for None), rejecting any other type."""
    if value is None:
        return kind()
    if not isinstance(value, kind):
        expected = "an object" if kind is dict else "a list"
        raise ValueError(f"{what} must be {expected}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Component:
    """A single package occurrence in the lock file."""

    name: str
    version: str
    bom_ref: str
    purl: Optional[str] = None
    kind: ComponentKind = ComponentKind.LIBRARY
    groups: Tuple[str, ...] = ()
    workspace_member: bool = False

    @property
    def lookup_name(self) -> str:
        return self.name.lower()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "purl": self.purl,
            "bom-ref": self.bom_ref,
            "type": self.kind.value,
        }
        if self.groups:
            data["groups"] = list(self.groups)
        if self.workspace_member:
            data["workspaceMember"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Component":
        """Build a component from its JSON form.

        ``bom-ref`` falls back to ``purl`` when absent, matching how SBOM
        tooling keys components.
        """
        data = _expect(data, dict, "pkgList entry")
        purl = data.get("purl")
        bom_ref = data.get("bom-ref") or purl
        if not bom_ref:
            raise ValueError(f"Component {data.get('name')!r} has neither bom-ref nor purl")
        return cls(
            name=_as_str(data.get("name")),
            version=_as_str(data.get("version")),
            bom_ref=str(bom_ref),
            purl=purl,
            kind=ComponentKind.from_value(data.get("type")),
            groups=tuple(sorted({str(g) for g in _expect(data.get("groups"), list, "groups")})),
            workspace_member=bool(data.get("workspaceMember", False)),
        )


@dataclass(frozen=True)
class DependencyEdgeSet:
    """Direct dependencies of one component, keyed by identifier."""

    ref: str
    depends_on: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "depends_on", _unique(self.depends_on))

    def to_dict(self) -> Dict[str, Any]:
        return {"ref": self.ref, "dependsOn": list(self.depends_on)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DependencyEdgeSet":
        data = _expect(data, dict, "dependenciesList entry")
        ref = data.get("ref")
        if not ref:
            raise ValueError("Dependency node is missing 'ref'")
        depends_on = _expect(data.get("dependsOn"), list, f"dependsOn of {ref}")
        return cls(ref=str(ref), depends_on=tuple(str(r) for r in depends_on))


@dataclass(frozen=True)
class ParentComponent:
    """Identity of the project the lock file belongs to."""

    name: str
    version: str
    bom_ref: str
    purl: Optional[str] = None
    type: str = ComponentKind.APPLICATION.value
    description: Optional[str] = None

    def as_component(self) -> Component:
        """Represent the project as a graph node."""
        return Component(
            name=self.name,
            version=self.version,
            bom_ref=self.bom_ref,
            purl=self.purl,
            kind=ComponentKind.from_value(self.type),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "purl": self.purl,
            "bom-ref": self.bom_ref,
            "type": self.type,
        }
        if self.description:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParentComponent":
        data = _expect(data, dict, "parentComponent")
        purl = data.get("purl")
        bom_ref = data.get("bom-ref") or purl
        if not bom_ref:
            raise ValueError(f"Parent component {data.get('name')!r} has neither bom-ref nor purl")
        return cls(
            name=_as_str(data.get("name")),
            version=_as_str(data.get("version")),
            bom_ref=str(bom_ref),
            purl=purl,
            type=_as_str(data.get("type"), ComponentKind.APPLICATION.value),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class ModeFlags:
    """Which manifest dialects were detected. Several may be true at once."""

    poetry_mode: bool = False
    uv_mode: bool = False
    hatch_mode: bool = False

    def merge(self, other: "ModeFlags") -> "ModeFlags":
        return ModeFlags(
            poetry_mode=self.poetry_mode or other.poetry_mode,
            uv_mode=self.uv_mode or other.uv_mode,
            hatch_mode=self.hatch_mode or other.hatch_mode,
        )

    def to_dict(self) -> Dict[str, bool]:
        return {
            "poetryMode": self.poetry_mode,
            "uvMode": self.uv_mode,
            "hatchMode": self.hatch_mode,
        }


@dataclass(frozen=True)
class LockBundle:
    """Everything the parser extracted from one lock file and/or manifest.

    Every collection defaults to empty and ``parent_component`` defaults to
    None; consumers must not assume any of them is populated.
    """

    parent_component: Optional[ParentComponent] = None
    pkg_list: Tuple[Component, ...] = ()
    dependencies_list: Tuple[DependencyEdgeSet, ...] = ()
    root_list: Tuple[str, ...] = ()
    direct_deps_keys: Tuple[str, ...] = ()
    # Stored as a read-only view and excluded from hash()
    group_deps_keys: Mapping[str, Tuple[str, ...]] = field(default_factory=dict, hash=False)
    workspace_paths: Tuple[str, ...] = ()
    modes: ModeFlags = field(default_factory=ModeFlags)
    lock_file: Optional[str] = None
    pyproject_file: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "group_deps_keys", MappingProxyType(dict(self.group_deps_keys)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parentComponent": self.parent_component.to_dict() if self.parent_component else None,
            "pkgList": [c.to_dict() for c in self.pkg_list],
            "dependenciesList": [d.to_dict() for d in self.dependencies_list],
            "rootList": list(self.root_list),
            "directDepsKeys": {name: True for name in self.direct_deps_keys},
            "groupDepsKeys": {name: list(groups) for name, groups in self.group_deps_keys.items()},
            "workspacePaths": list(self.workspace_paths),
            **self.modes.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], **sources: Optional[str]) -> "LockBundle":
        """Build a bundle from its JSON form.

        Every key is optional and may be null. ``rootList`` entries may be
        plain identifiers or component objects carrying a ``bom-ref``.
        ``directDepsKeys`` may be a ``{name: true}`` object or a list of names.

        Raises:
            ValueError: If a key has the wrong JSON type or an entry has no
                identifier.
        """
        data = _expect(data, dict, "Bundle")
        parent = data.get("parentComponent")

        roots = []
        for entry in _expect(data.get("rootList"), list, "rootList"):
            if isinstance(entry, dict):
                entry = entry.get("bom-ref") or entry.get("purl")
            if entry:
                roots.append(str(entry))

        direct = data.get("directDepsKeys")
        if not isinstance(direct, dict):
            direct = _expect(direct, list, "directDepsKeys")

        groups = {}
        for name, names in _expect(data.get("groupDepsKeys"), dict, "groupDepsKeys").items():
            groups[str(name)] = tuple(sorted({str(g) for g in _expect(names, list, f"groupDepsKeys.{name}")}))

        return cls(
            parent_component=ParentComponent.from_dict(parent) if parent else None,
            pkg_list=tuple(Component.from_dict(c) for c in _expect(data.get("pkgList"), list, "pkgList")),
            dependencies_list=tuple(
                DependencyEdgeSet.from_dict(d) for d in _expect(data.get("dependenciesList"), list, "dependenciesList")
            ),
            root_list=_unique(roots),
            direct_deps_keys=_unique(str(name) for name in direct),
            group_deps_keys=groups,
            workspace_paths=tuple(str(p) for p in _expect(data.get("workspacePaths"), list, "workspacePaths")),
            modes=ModeFlags(
                poetry_mode=bool(data.get("poetryMode")),
                uv_mode=bool(data.get("uvMode")),
                hatch_mode=bool(data.get("hatchMode")),
            ),
            lock_file=sources.get("lock_file"),
            pyproject_file=sources.get("pyproject_file"),
        )
