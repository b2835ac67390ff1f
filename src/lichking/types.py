from __future__ import annotations

"""Shared data structures for license collection and compatibility checks.

Package descriptions live in ``types_packages`` and run results in
``types_report``; this module re-exports both so callers have one import
path.
"""

from .types_packages import Metadata, Package, PackageSelection
from .types_report import (
    BundleReport,
    CheckFinding,
    CheckResult,
    Choice,
    LicenseEntry,
    LicenseIssue,
    PackageLicenses,
    RunDiagnostics,
    roots_phrase,
)

__all__ = [
    "BundleReport",
    "CheckFinding",
    "CheckResult",
    "Choice",
    "LicenseEntry",
    "LicenseIssue",
    "Metadata",
    "Package",
    "PackageLicenses",
    "PackageSelection",
    "RunDiagnostics",
    "roots_phrase",
]
