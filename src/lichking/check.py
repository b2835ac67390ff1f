from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from .compatibility import Inclusion, can_include
from .policy import Policy, expired_exceptions, match_exception
from .types_packages import Package
from .types_report import CheckFinding, CheckResult

logger = logging.getLogger(__name__)


def run_check(
    root: Package,
    packages: Iterable[Package],
    policy: Optional[Policy] = None,
    now: Optional[datetime] = None,
) -> CheckResult:
    """Ask the compatibility oracle about every dependency of ``root``.

    ``NO`` verdicts fail the check unless an unexpired policy exception waives
    them; ``UNKNOWN`` verdicts only produce warnings.
    """

    now = now or datetime.now(timezone.utc)
    license = root.license_id
    result = CheckResult(root=root)

    for package in packages:
        if package.id == root.id:
            continue
        dependency_license = package.license_id
        verdict = can_include(license, dependency_license)
        waiver = match_exception(policy, package, now) if policy and verdict is Inclusion.NO else None
        result.findings.append(CheckFinding(package, verdict, waiver))

        if verdict is Inclusion.NO and waiver is None:
            logger.error(
                "%s cannot include package %s, license %s is incompatible with %s",
                root.name,
                package.name,
                dependency_license,
                license,
            )
        elif verdict is Inclusion.NO:
            logger.info(
                "%s includes package %s under an exception approved by %s: %s",
                root.name,
                package.name,
                waiver.approved_by or "unknown",
                waiver.reason,
            )
        elif verdict is Inclusion.UNKNOWN:
            message = (
                f"{root.name} might not be able to include package {package.name}, "
                f"license {dependency_license} is not known to be compatible with {license}"
            )
            logger.warning(message)
            result.warnings.append(message)

    if policy:
        for exc in expired_exceptions(policy, now):
            message = f"Exception for {exc.package} expired on {exc.expires.isoformat()}"
            logger.warning(message)
            result.warnings.append(message)

    return result
