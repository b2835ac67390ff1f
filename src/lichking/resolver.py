from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Iterable, List, Union

from .errors import GraphError, MetadataError
from .graph import DependencyKind
from .types_packages import Metadata, Package, PackageSelection

logger = logging.getLogger(__name__)


def _workspace_members(metadata: Metadata) -> List[Package]:
    return [metadata.by_id(package_id) for package_id in metadata.workspace_members]


def _default_members(metadata: Metadata) -> List[str] | None:
    if metadata.workspace_root is None:
        return None
    manifest_path = Path(metadata.workspace_root) / "Cargo.toml"
    try:
        manifest = tomllib.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise MetadataError(f"Unable to read workspace manifest {manifest_path}: {exc}") from exc
    return (manifest.get("workspace") or {}).get("default-members")


def _find_member(metadata: Metadata, members: List[Package], entry: str) -> Package:
    # default-members lists member directories; bare package names are accepted too.
    wanted = (Path(metadata.workspace_root) / entry).resolve() if metadata.workspace_root else None
    for member in members:
        if member.name == entry:
            return member
        if wanted is not None and member.root is not None and Path(member.root).resolve() == wanted:
            return member
    raise GraphError(f"Couldn't find workspace member {entry}")


def resolve_roots(metadata: Metadata, selection: PackageSelection) -> List[Package]:
    """Collect the top level packages a run starts from."""

    if selection.mode == "all":
        return _workspace_members(metadata)

    if selection.mode == "specific":
        package = metadata.by_name(selection.name or "")
        if package is None:
            raise GraphError(f"Could not find package {selection.name}")
        return [package]

    # A resolve root means a concrete package directory; otherwise this is a
    # virtual manifest and the workspace's default members apply.
    if metadata.graph is None:
        raise GraphError("Couldn't load resolve graph")
    if metadata.graph.root:
        return [metadata.by_id(metadata.graph.root)]

    members = _workspace_members(metadata)
    default_members = _default_members(metadata)
    if default_members is None:
        return members
    return [_find_member(metadata, members, entry) for entry in default_members]


def resolve_packages(metadata: Metadata, roots: Iterable[Union[Package, str]]) -> List[Package]:
    """Return every package reachable from ``roots`` over normal dependency edges.

    Roots are part of the result. Development and build-only edges are not
    followed. Any id missing from the package set or the resolve graph fails
    the whole resolution.
    """

    graph = metadata.graph
    if graph is None:
        raise GraphError("Couldn't load resolve graph")

    root_ids = [root.id if isinstance(root, Package) else root for root in roots]
    to_check = list(reversed(root_ids))
    added: set[str] = set()
    result: List[Package] = []

    while to_check:
        package_id = to_check.pop()
        if package_id in added:
            continue
        added.add(package_id)
        result.append(metadata.by_id(package_id))
        for edge in graph.edges_from(package_id, kind=DependencyKind.NORMAL):
            if edge.target not in added:
                to_check.append(edge.target)

    logger.debug("Resolved %d package(s) from %d root(s)", len(result), len(root_ids))
    return result
