"""Graph indexing and queries over a parsed ``LockBundle``.

Duplicate names
---------------
Two components may share a name (several locked versions, workspace members
shadowing a registry package). ``QueryEngine.resolve_by_name`` picks one
deterministically:

1. the first match, in name-index order, whose identifier is in the root list;
2. otherwise the first match in name-index order.

Name-index order is ``pkgList`` order with the parent component appended last.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .exceptions import MalformedGraphError, NotFoundError
from .logging_config import logger
from .models import Component, DependencyEdgeSet, LockBundle


@dataclass
class GraphIndex:
    """Lookup tables over one bundle. Built by ``build_index``."""

    bundle: LockBundle
    by_ref: Dict[str, Component] = field(default_factory=dict)
    by_name: Dict[str, List[Component]] = field(default_factory=dict)
    edges: Dict[str, DependencyEdgeSet] = field(default_factory=dict)
    roots: frozenset = frozenset()


def _add_component(index: GraphIndex, component: Component) -> None:
    if component.bom_ref in index.by_ref:
        raise MalformedGraphError(f"Duplicate component identifier: {component.bom_ref}", component.bom_ref)
    index.by_ref[component.bom_ref] = component
    index.by_name.setdefault(component.lookup_name, []).append(component)


def build_index(bundle: LockBundle) -> GraphIndex:
    """
    Build identifier and name lookup tables for a bundle.

    Args:
        bundle: Parsed bundle

    Returns:
        GraphIndex over the bundle's components and edges

    Raises:
        MalformedGraphError: If an edge, edge key or root references an
            identifier absent from the component table, or an identifier
            is defined twice.
    """
    index = GraphIndex(bundle=bundle)

    for component in bundle.pkg_list:
        _add_component(index, component)
    if bundle.parent_component is not None and bundle.parent_component.bom_ref not in index.by_ref:
        _add_component(index, bundle.parent_component.as_component())

    for edge_set in bundle.dependencies_list:
        if edge_set.ref not in index.by_ref:
            raise MalformedGraphError(f"Dependency node references unknown component: {edge_set.ref}", edge_set.ref)
        if edge_set.ref in index.edges:
            raise MalformedGraphError(f"Duplicate dependency node for: {edge_set.ref}", edge_set.ref)
        for target in edge_set.depends_on:
            if target not in index.by_ref:
                raise MalformedGraphError(
                    f"Dependency edge {edge_set.ref} -> {target} references unknown component: {target}", target
                )
        index.edges[edge_set.ref] = edge_set

    for root in bundle.root_list:
        if root not in index.by_ref:
            raise MalformedGraphError(f"Root list references unknown component: {root}", root)
    index.roots = frozenset(bundle.root_list)

    logger.debug(
        f"Indexed {len(index.by_ref)} component(s), {len(index.edges)} dependency node(s), {len(index.roots)} root(s)"
    )
    return index


@dataclass(frozen=True)
class Subgraph:
    """One node and its direct edges."""

    root: str
    node: DependencyEdgeSet

    def to_dict(self) -> dict:
        return {"root": self.root, "node": self.node.to_dict()}


class QueryEngine:
    """Point and one-hop structural queries over a ``GraphIndex``.

    Example:
        engine = QueryEngine(build_index(bundle))
        ref = engine.resolve_by_name("Django")
        node = engine.lookup_edge_set(ref)
    """

    def __init__(self, index: GraphIndex) -> None:
        self._index = index

    @classmethod
    def from_bundle(cls, bundle: LockBundle) -> "QueryEngine":
        return cls(build_index(bundle))

    @property
    def index(self) -> GraphIndex:
        return self._index

    def find_by_name(self, name: str) -> List[Component]:
        """All components with this name (case-insensitive), in index order."""
        return list(self._index.by_name.get(name.lower(), ()))

    def get_component(self, ref: str) -> Optional[Component]:
        return self._index.by_ref.get(ref)

    def resolve_by_name(self, name: str) -> str:
        """
        Resolve a package name to its identifier.

        Args:
            name: Package name, matched case-insensitively

        Returns:
            The identifier of the matching component. Among duplicates, the
            first root match wins, else the first match.

        Raises:
            NotFoundError: If no component has this name.
        """
        matches = self.find_by_name(name)
        if not matches:
            raise NotFoundError(name, kind="name")

        if len(matches) > 1:
            for component in matches:
                if component.bom_ref in self._index.roots:
                    logger.debug(f"{len(matches)} components named {name!r}; using root {component.bom_ref}")
                    return component.bom_ref
            logger.debug(f"{len(matches)} components named {name!r}; using first match {matches[0].bom_ref}")

        return matches[0].bom_ref

    def lookup_edge_set(self, ref: str) -> DependencyEdgeSet:
        """
        Return the direct dependencies of one component.

        A known component without a dependency node has no dependencies.

        Raises:
            NotFoundError: If the identifier is not in the component table.
        """
        if ref not in self._index.by_ref:
            raise NotFoundError(ref)
        return self._index.edges.get(ref) or DependencyEdgeSet(ref=ref)

    def extract_subgraph(self, ref: str) -> Subgraph:
        """One-hop subgraph rooted at ``ref``. No transitive expansion."""
        return Subgraph(root=ref, node=self.lookup_edge_set(ref))
