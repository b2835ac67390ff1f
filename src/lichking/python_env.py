"""Package metadata for installed Python distributions.

Each distribution becomes a :class:`Package` keyed by its canonical name and
each unconditional ``Requires-Dist`` entry becomes a normal dependency edge.
License texts are looked up next to the distribution metadata, in the
``licenses/`` folder when the wheel ships one.
"""

from __future__ import annotations

import logging
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Iterable, List, Optional

from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

from .errors import MetadataError
from .graph import DependencyEdge, DependencyKind, ResolveGraph
from .types_packages import Metadata, Package

logger = logging.getLogger(__name__)

METADATA_FILES = {"METADATA", "PKG-INFO"}
METADATA_SUFFIXES = (".dist-info", ".egg-info")


def declared_license(dist) -> Optional[str]:
    meta = dist.metadata
    expression = meta.get("License-Expression")
    if expression and expression.strip():
        return expression.strip()
    # Older metadata often stuffs the full license text into this field.
    value = (meta.get("License") or "").strip()
    if value and "\n" not in value and value.upper() != "UNKNOWN":
        return value
    return None


def _find_metadata_folder(dist) -> Optional[Path]:
    wanted = canonicalize_name(dist.metadata["Name"])
    try:
        entries = sorted(Path(dist.locate_file("")).iterdir())
    except OSError:
        return None
    for entry in entries:
        if not entry.name.endswith(METADATA_SUFFIXES) or not entry.is_dir():
            continue
        name, _, rest = entry.name.rsplit(".", 1)[0].partition("-")
        version = rest.split("-")[0]
        if canonicalize_name(name) == wanted and version in ("", dist.version):
            return entry.resolve()
    return None


def metadata_directory(dist) -> Optional[Path]:
    for file in dist.files or []:
        if file.name in METADATA_FILES:
            return Path(dist.locate_file(file)).resolve().parent
    # No RECORD: look for the metadata folder beside the installed files.
    return _find_metadata_folder(dist)


def license_root(dist) -> Optional[Path]:
    directory = metadata_directory(dist)
    if directory is None:
        logger.debug("Unable to locate the metadata directory of %s", dist.metadata.get("Name"))
        return None
    licenses = directory / "licenses"
    return licenses if licenses.is_dir() else directory


def requirement_targets(dist) -> List[str]:
    """Canonical names of the distributions ``dist`` always needs."""

    targets = []
    for raw in dist.requires or []:
        try:
            requirement = Requirement(raw)
        except InvalidRequirement as exc:
            logger.debug("Ignoring invalid requirement %r of %s: %s", raw, dist.metadata.get("Name"), exc)
            continue
        if requirement.marker is not None and not requirement.marker.evaluate({"extra": ""}):
            continue
        targets.append(canonicalize_name(requirement.name))
    return targets


def load_python_environment(
    paths: Optional[Iterable[str]] = None,
    root: Optional[str] = None,
) -> Metadata:
    """Describe the distributions importable from ``paths`` (``sys.path`` by default).

    ``root`` names the distribution a default run starts from; without one
    every installed distribution is treated as a workspace member.
    """

    if paths is None:
        distributions = importlib_metadata.distributions()
    else:
        distributions = importlib_metadata.distributions(path=list(paths))

    found = {}
    for dist in distributions:
        name = dist.metadata.get("Name")
        if not name:
            continue
        package_id = canonicalize_name(name)
        # Earlier path entries shadow later ones, as for imports.
        if package_id in found:
            continue
        found[package_id] = dist

    packages = []
    edges = []
    for package_id, dist in found.items():
        packages.append(
            Package(
                id=package_id,
                name=dist.metadata["Name"],
                version=dist.version,
                root=license_root(dist),
                license=declared_license(dist),
            )
        )
        for target in requirement_targets(dist):
            if target not in found:
                logger.debug("%s requires %s, which is not installed", package_id, target)
                continue
            edges.append(DependencyEdge(package_id, target, DependencyKind.NORMAL))

    root_id = None
    if root is not None:
        root_id = canonicalize_name(root)
        if root_id not in found:
            raise MetadataError(f"{root} is not installed in this Python environment")

    graph = ResolveGraph.from_edges(found, edges, root=root_id)
    logger.debug("Loaded %d distribution(s) with %d edge(s)", len(packages), len(edges))
    return Metadata(
        packages=packages,
        graph=graph,
        workspace_members=[root_id] if root_id else list(found),
    )
