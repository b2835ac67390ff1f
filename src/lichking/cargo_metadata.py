"""Package metadata from ``cargo metadata --format-version 1``."""

from __future__ import annotations

import json
import logging
import os
import subprocess
from pathlib import Path
from typing import Optional

from .errors import MetadataError
from .graph import DependencyEdge, DependencyKind, ResolveGraph
from .types_packages import Metadata, Package

logger = logging.getLogger(__name__)

DEP_KINDS = {
    None: DependencyKind.NORMAL,
    "normal": DependencyKind.NORMAL,
    "dev": DependencyKind.DEVELOPMENT,
    "build": DependencyKind.BUILD,
}


def _package(raw: dict) -> Package:
    manifest_path = Path(raw["manifest_path"])
    return Package(
        id=raw["id"],
        name=raw["name"],
        version=str(raw["version"]),
        root=manifest_path.parent,
        license=raw.get("license"),
        license_file=raw.get("license_file"),
    )


def _graph(resolve: dict) -> ResolveGraph:
    node_ids = []
    edges = []
    for node in resolve.get("nodes") or []:
        node_ids.append(node["id"])
        for dep in node.get("deps") or []:
            for info in dep.get("dep_kinds") or []:
                kind = DEP_KINDS.get(info.get("kind"))
                if kind is None:
                    logger.debug("Ignoring unknown dependency kind %r on %s", info.get("kind"), dep["pkg"])
                    continue
                edges.append(DependencyEdge(node["id"], dep["pkg"], kind))
    return ResolveGraph.from_edges(node_ids, edges, root=resolve.get("root"))


def parse_cargo_metadata(data: dict) -> Metadata:
    try:
        packages = [_package(raw) for raw in data["packages"]]
        resolve = data.get("resolve")
        graph = _graph(resolve) if resolve is not None else None
    except (KeyError, TypeError, AttributeError) as exc:
        raise MetadataError(f"Malformed cargo metadata: {exc!r}") from exc

    workspace_root = data.get("workspace_root")
    return Metadata(
        packages=packages,
        graph=graph,
        workspace_members=list(data.get("workspace_members") or []),
        workspace_root=Path(workspace_root) if workspace_root else None,
    )


def load_metadata_file(path: Path) -> Metadata:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise MetadataError(f"Unable to load cargo metadata from {path}: {exc}") from exc
    return parse_cargo_metadata(data)


def run_cargo_metadata(
    manifest_path: Optional[Path] = None,
    frozen: bool = False,
    locked: bool = False,
    verbose: int = 0,
    quiet: bool = False,
    cargo: Optional[str] = None,
) -> Metadata:
    cargo = cargo or os.environ.get("CARGO", "cargo")
    command = [cargo, "metadata", "--format-version", "1"]
    if manifest_path:
        command.extend(["--manifest-path", str(manifest_path)])
    command.extend(["--verbose"] * min(verbose, 4))
    if quiet:
        command.append("--quiet")
    if frozen:
        command.append("--frozen")
    if locked:
        command.append("--locked")

    logger.debug("Running %s", " ".join(command))
    try:
        result = subprocess.run(command, check=True, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise MetadataError(f"Unable to run {cargo}: {exc}") from exc
    except subprocess.CalledProcessError as exc:
        raise MetadataError(f"cargo metadata failed: {(exc.stderr or '').strip()}") from exc

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise MetadataError(f"cargo metadata produced invalid JSON: {exc}") from exc
    return parse_cargo_metadata(data)
