from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from packaging.version import InvalidVersion, Version

from .errors import GraphError
from .graph import ResolveGraph
from .license import UNSPECIFIED, File, LicenseId, parse_license


@dataclass
class Package:
    id: str
    name: str
    version: str
    root: Optional[Path]
    license: Optional[str] = None
    license_file: Optional[str] = None

    @property
    def license_id(self) -> LicenseId:
        """Parsed declared license; a license file is only used without a license string."""

        if self.license and self.license.strip():
            return parse_license(self.license)
        if self.license_file:
            return File(Path(self.license_file))
        return UNSPECIFIED

    @property
    def sort_key(self) -> tuple[str, tuple]:
        return (self.name, _version_key(self.version))


def _version_key(version: str) -> tuple:
    # Unparseable versions sort after every valid one, by their raw text.
    try:
        return (0, Version(version), "")
    except InvalidVersion:
        return (1, None, version)


@dataclass
class Metadata:
    """Packages plus the resolve graph describing how they depend on each other."""

    packages: List[Package]
    graph: Optional[ResolveGraph] = None
    workspace_members: List[str] = field(default_factory=list)
    workspace_root: Optional[Path] = None
    _index: dict[str, Package] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._index = {package.id: package for package in self.packages}

    def by_id(self, package_id: str) -> Package:
        try:
            return self._index[package_id]
        except KeyError:
            raise GraphError(f"Couldn't find package {package_id}") from None

    def by_name(self, name: str) -> Optional[Package]:
        for package in self.packages:
            if package.name == name:
                return package
        return None


@dataclass(frozen=True)
class PackageSelection:
    """Which packages seed a run: every workspace member, the default ones, or one by name."""

    mode: str = "default"
    name: Optional[str] = None

    @classmethod
    def all(cls) -> "PackageSelection":
        return cls(mode="all")

    @classmethod
    def default(cls) -> "PackageSelection":
        return cls(mode="default")

    @classmethod
    def specific(cls, name: str) -> "PackageSelection":
        return cls(mode="specific", name=name)
