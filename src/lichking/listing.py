from __future__ import annotations

from typing import Iterable, List

from .license import LicenseId, license_sort_key
from .types_packages import Package

BY_CHOICES = ("license", "package")


def group_by_license(packages: Iterable[Package]) -> List[tuple[LicenseId, List[str]]]:
    groups: dict = {}
    for package in packages:
        groups.setdefault(package.license_id, []).append(package.name)
    return [
        (license, sorted(names))
        for license, names in sorted(groups.items(), key=lambda item: license_sort_key(item[0]))
    ]


def list_by_license(packages: Iterable[Package]) -> List[str]:
    return [f"{license}: {', '.join(names)}" for license, names in group_by_license(packages)]


def list_by_package(packages: Iterable[Package]) -> List[str]:
    ordered = sorted(packages, key=lambda package: package.sort_key)
    return [f"{package.name}: {package.license_id}" for package in ordered]


def render_listing(packages: Iterable[Package], by: str = "license") -> List[str]:
    if by == "license":
        return list_by_license(packages)
    if by == "package":
        return list_by_package(packages)
    raise ValueError(f"Unknown listing order: {by}")
