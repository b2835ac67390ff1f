from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional

import yaml

from .errors import PolicyError
from .license import parse_license
from .types_packages import Package


@dataclass
class PolicyException:
    """A reviewed, possibly time-limited waiver for one incompatible dependency."""

    package: str
    license: Optional[str] = None
    reason: str = ""
    approved_by: Optional[str] = None
    expires: Optional[datetime] = None

    def expired(self, now: datetime) -> bool:
        return self.expires is not None and self.expires < now

    def matches(self, package: Package) -> bool:
        if self.package != package.name:
            return False
        # Without a license the waiver follows the package across relicensing.
        return self.license is None or parse_license(self.license) == package.license_id


@dataclass
class Policy:
    exceptions: List[PolicyException] = field(default_factory=list)


def _parse_expires(value, package: str) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = datetime.fromisoformat(str(value))
        except ValueError as exc:
            raise PolicyError(f"Invalid expiry {value!r} on the exception for {package}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def load_policy(path: Path) -> Policy:
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise PolicyError(f"Unable to load policy {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise PolicyError(f"Policy {path} must be a mapping")

    exceptions: list[PolicyException] = []
    for entry in raw.get("exceptions", []) or []:
        if not isinstance(entry, dict) or not entry.get("package"):
            raise PolicyError(f"Policy {path}: every exception needs a package")
        package = str(entry["package"])
        exceptions.append(
            PolicyException(
                package=package,
                license=str(entry["license"]) if entry.get("license") else None,
                reason=str(entry.get("reason", "")),
                approved_by=entry.get("approved_by"),
                expires=_parse_expires(entry.get("expires"), package),
            )
        )
    return Policy(exceptions=exceptions)


def match_exception(policy: Policy, package: Package, now: datetime) -> Optional[PolicyException]:
    for exc in policy.exceptions:
        if exc.matches(package) and not exc.expired(now):
            return exc
    return None


def expired_exceptions(policy: Policy, now: datetime) -> List[PolicyException]:
    return [exc for exc in policy.exceptions if exc.expired(now)]
