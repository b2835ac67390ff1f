"""Resolve graph structures.

The graph is supplied by a metadata provider (cargo metadata, the installed
Python environment) and only ever read: each node is a package id and each
edge records that the source package depends on the target, together with the
kind of dependency.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from .errors import GraphError


class DependencyKind(str, Enum):
    NORMAL = "normal"
    DEVELOPMENT = "dev"
    BUILD = "build"


@dataclass(frozen=True)
class DependencyEdge:
    """One dependency relationship between two packages."""

    source: str
    target: str
    kind: DependencyKind = DependencyKind.NORMAL


@dataclass
class ResolveGraph:
    """Adjacency lists keyed by package id.

    A package without an entry in ``nodes`` was never resolved, which is
    different from a package that resolved to no dependencies (empty list).
    """

    nodes: dict[str, List[DependencyEdge]] = field(default_factory=dict)
    root: Optional[str] = None

    @classmethod
    def from_edges(
        cls,
        package_ids: Iterable[str],
        edges: Iterable[DependencyEdge],
        root: Optional[str] = None,
    ) -> "ResolveGraph":
        nodes: dict[str, List[DependencyEdge]] = {package_id: [] for package_id in package_ids}
        for edge in edges:
            nodes.setdefault(edge.source, []).append(edge)
        return cls(nodes=nodes, root=root)

    def edges_from(self, source_id: str, kind: Optional[DependencyKind] = None) -> List[DependencyEdge]:
        try:
            edges = self.nodes[source_id]
        except KeyError:
            raise GraphError(f"Couldn't find deps for package {source_id}") from None
        return [edge for edge in edges if kind is None or edge.kind == kind]
