"""Collect the chosen license texts of every package going into a bundle."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .choice import choose
from .discovery import find_license_texts
from .errors import DiscoveryIoError
from .license import Unspecified, members
from .types_packages import Package
from .types_report import (
    BundleReport,
    LicenseEntry,
    LicenseIssue,
    PackageLicenses,
    RunDiagnostics,
)

logger = logging.getLogger(__name__)

MISSING_LICENSE_SUMMARY = """
  Our liches failed to recognize a license in one or more packages.

  We would be very grateful if you could check the corresponding package
  directories (see the package specific message above) to see if there is an
  easily recognizable license file available.

  If there is please open an issue on the lichking tracker with the details
  so we can make sure this license is recognized in the future.

  If there isn't you could submit an issue to the package's project asking
  them to include the text of their license in the built packages."""

LOW_QUALITY_SUMMARY = (
    "Our liches are very unsure about one or more licenses that were put into the "
    "bundle. Please check the specific error messages above."
)

_ISSUE_LEVELS = {"high": logging.ERROR, "medium": logging.WARNING, "low": logging.INFO}


def collect_package(package: Package) -> PackageLicenses:
    """Look up one text per license member of ``package``."""

    license = package.license_id
    result = PackageLicenses(package=package, license=license)

    if isinstance(license, Unspecified):
        result.issues.append(
            LicenseIssue(
                f"[UNSPECIFIED_LICENSE] {package.name} {package.version} does not declare a license",
                severity="high",
                code="UNSPECIFIED_LICENSE",
                package=package.name,
            )
        )
        result.missing_license = True
        return result

    if package.root is None:
        raise DiscoveryIoError(
            package.name, FileNotFoundError(f"no directory is known for {package.name} {package.version}")
        )

    for member in members(license):
        texts = find_license_texts(package.root, member)
        choice = choose(texts, package=package, license=member)
        result.entries.append(LicenseEntry(member, choice))
        result.issues.extend(choice.issues)
        result.missing_license = result.missing_license or choice.missing_license
        result.low_quality_license = result.low_quality_license or choice.low_quality_license
    return result


def build_bundle(
    roots: Iterable[Package],
    packages: Iterable[Package],
    generated_at: Optional[datetime] = None,
) -> BundleReport:
    diagnostics = RunDiagnostics()
    collected: List[PackageLicenses] = []
    for package in sorted(packages, key=lambda package: package.sort_key):
        outcome = collect_package(package)
        diagnostics.record(outcome)
        collected.append(outcome)

    return BundleReport(
        roots=list(roots),
        packages=collected,
        diagnostics=diagnostics,
        generated_at=generated_at or datetime.now(timezone.utc),
    )


def log_diagnostics(diagnostics: RunDiagnostics) -> None:
    if diagnostics.missing_license:
        logger.error(MISSING_LICENSE_SUMMARY)
    if diagnostics.low_quality_license:
        logger.warning(LOW_QUALITY_SUMMARY)
    for issue in diagnostics.issues:
        logger.log(_ISSUE_LEVELS.get(issue.severity, logging.WARNING), issue.message)
