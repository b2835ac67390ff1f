from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .discovery import Confidence, LicenseText
from .license import LicenseId
from .types_packages import Package
from .types_report import Choice, LicenseIssue

logger = logging.getLogger(__name__)

TIER_PRIORITY = (
    Confidence.CONFIDENT,
    Confidence.SEMI_CONFIDENT,
    Confidence.UNSURE,
    Confidence.NO_TEMPLATE,
)


def partition(texts: Iterable[LicenseText]) -> dict[Confidence, List[LicenseText]]:
    tiers: dict[Confidence, List[LicenseText]] = {confidence: [] for confidence in TIER_PRIORITY}
    for text in texts:
        tiers[text.confidence].append(text)
    return tiers


def choose(
    texts: Iterable[LicenseText],
    package: Optional[Package] = None,
    license: Optional[LicenseId] = None,
) -> Choice:
    """Pick the most trustworthy candidate text.

    The highest non-empty confidence tier wins and, within it, the first
    candidate in discovery order. Several candidates in the winning tier are
    reported as ambiguous; that only lowers the run's quality when the tier
    itself is below ``CONFIDENT``.
    """

    subject = package.name if package else "package"
    license_name = str(license) if license is not None else "its license"
    tiers = partition(texts)

    for confidence in TIER_PRIORITY:
        candidates = tiers[confidence]
        if not candidates:
            continue

        issues: List[LicenseIssue] = []
        low_quality = False
        if len(candidates) > 1:
            paths = ", ".join(str(candidate.path) for candidate in candidates)
            issues.append(
                LicenseIssue(
                    f"[AMBIGUOUS_CANDIDATES] {subject} has {len(candidates)} {confidence.label} "
                    f"candidates for {license_name}: {paths}",
                    severity="low",
                    code="AMBIGUOUS_CANDIDATES",
                    package=subject,
                )
            )
            low_quality = confidence is not Confidence.CONFIDENT
        elif confidence in (Confidence.SEMI_CONFIDENT, Confidence.UNSURE):
            issues.append(
                LicenseIssue(
                    f"[LOW_QUALITY_LICENSE] {subject} only has a {confidence.label} "
                    f"candidate for {license_name}: {candidates[0].path}",
                    severity="medium",
                    code="LOW_QUALITY_LICENSE",
                    package=subject,
                )
            )
            low_quality = True

        logger.debug("Chose %s (%s) for %s", candidates[0].path, confidence.label, subject)
        return Choice(
            text=candidates[0],
            confidence=confidence,
            candidates=candidates,
            issues=issues,
            low_quality_license=low_quality,
        )

    return Choice(
        text=None,
        confidence=None,
        issues=[
            LicenseIssue(
                f"[MISSING_LICENSE_TEXT] {subject} has no license text for {license_name}",
                severity="high",
                code="MISSING_LICENSE_TEXT",
                package=subject,
            )
        ],
        missing_license=True,
    )
