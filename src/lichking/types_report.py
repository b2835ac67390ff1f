from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from .compatibility import Inclusion
from .discovery import Confidence, LicenseText
from .license import LicenseId
from .types_packages import Package

if TYPE_CHECKING:
    from .policy import PolicyException


@dataclass
class LicenseIssue:
    message: str
    severity: str = "medium"
    code: str | None = None
    package: str | None = None

    def as_dict(self) -> dict:
        return {
            "message": self.message,
            "severity": self.severity,
            "code": self.code,
            "package": self.package,
        }


@dataclass
class Choice:
    """The text picked for one license of one package, plus what went wrong picking it."""

    text: Optional[LicenseText]
    confidence: Optional[Confidence]
    candidates: List[LicenseText] = field(default_factory=list)
    issues: List[LicenseIssue] = field(default_factory=list)
    missing_license: bool = False
    low_quality_license: bool = False

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1


@dataclass
class LicenseEntry:
    license: LicenseId
    choice: Choice


@dataclass
class PackageLicenses:
    """All license texts found for one package, aligned with its license members."""

    package: Package
    license: LicenseId
    entries: List[LicenseEntry] = field(default_factory=list)
    issues: List[LicenseIssue] = field(default_factory=list)
    missing_license: bool = False
    low_quality_license: bool = False


@dataclass
class RunDiagnostics:
    """Run-wide flags; both only ever turn on."""

    missing_license: bool = False
    low_quality_license: bool = False
    issues: List[LicenseIssue] = field(default_factory=list)

    def record(self, outcome: Choice | PackageLicenses) -> None:
        self.missing_license = self.missing_license or outcome.missing_license
        self.low_quality_license = self.low_quality_license or outcome.low_quality_license
        self.issues.extend(outcome.issues)

    def merge(self, other: "RunDiagnostics") -> "RunDiagnostics":
        return RunDiagnostics(
            missing_license=self.missing_license or other.missing_license,
            low_quality_license=self.low_quality_license or other.low_quality_license,
            issues=[*self.issues, *other.issues],
        )

    @property
    def failed(self) -> bool:
        return self.missing_license or self.low_quality_license

    def as_dict(self) -> dict:
        return {
            "missing_license": self.missing_license,
            "low_quality_license": self.low_quality_license,
            "issues": [issue.as_dict() for issue in self.issues],
        }


def roots_phrase(roots: List[Package]) -> str:
    """``foo package`` for one root, ``a, b and c packages`` for several."""

    names = [root.name for root in roots]
    if not names:
        return "selected packages"
    if len(names) == 1:
        return f"{names[0]} package"
    return f"{', '.join(names[:-1])} and {names[-1]} packages"


@dataclass
class BundleReport:
    roots: List[Package]
    packages: List[PackageLicenses]
    diagnostics: RunDiagnostics
    generated_at: datetime

    @property
    def roots_name(self) -> str:
        return roots_phrase(self.roots)


@dataclass
class CheckFinding:
    dependency: Package
    verdict: Inclusion
    waiver: Optional["PolicyException"] = None


@dataclass
class CheckResult:
    root: Package
    findings: List[CheckFinding] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def incompatible(self) -> List[CheckFinding]:
        return [f for f in self.findings if f.verdict is Inclusion.NO and f.waiver is None]

    @property
    def unknown(self) -> List[CheckFinding]:
        return [f for f in self.findings if f.verdict is Inclusion.UNKNOWN]

    @property
    def passed(self) -> bool:
        return not self.incompatible
