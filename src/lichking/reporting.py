from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional

from jinja2 import Environment

from .compatibility import categorize_license
from .types_report import BundleReport, PackageLicenses

VARIANTS = ("inline", "name-only", "source", "split", "json")

MEMBER_SEPARATOR = "    ==============="

# Plain text and Python source only; nothing here is HTML.
env = Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)
env.filters["pyrepr"] = repr


def _header(report: BundleReport) -> str:
    return f"The {report.roots_name} uses some third party libraries under their own license terms:"


def _package_line(entry: PackageLicenses) -> str:
    return f" * {entry.package.name} {entry.package.version} under the terms of {entry.license}"


def _indented(text: str) -> List[str]:
    return [f"    {line}".rstrip() for line in text.splitlines()]


def _texts(entry: PackageLicenses) -> List[str]:
    lines: List[str] = []
    for index, member in enumerate(entry.entries):
        if index:
            lines.extend(["", MEMBER_SEPARATOR, ""])
        if member.choice.text is not None:
            lines.extend(_indented(member.choice.text.text))
    return lines


def split_filename(entry: PackageLicenses) -> str:
    return f"{entry.package.name}-{entry.package.version}.txt"


def _package_rows(report: BundleReport) -> Iterable[dict]:
    for entry in report.packages:
        yield {
            "name": entry.package.name,
            "version": entry.package.version,
            "license": str(entry.license),
            "license_category": categorize_license(entry.license),
            "missing_license": entry.missing_license,
            "low_quality_license": entry.low_quality_license,
            "texts": [
                {
                    "license": str(member.license),
                    "path": str(member.choice.text.path) if member.choice.text else None,
                    "confidence": member.choice.confidence.label if member.choice.confidence is not None else None,
                    "candidates": [str(candidate.path) for candidate in member.choice.candidates],
                }
                for member in entry.entries
            ],
            "issues": [issue.as_dict() for issue in entry.issues],
        }


def render_inline(report: BundleReport) -> str:
    lines = [_header(report), ""]
    for entry in report.packages:
        lines.append(f"{_package_line(entry)}:")
        lines.append("")
        texts = _texts(entry)
        if texts:
            lines.extend(texts)
            lines.append("")
    return "\n".join(lines) + "\n"


def render_name_only(report: BundleReport, suffixes: Optional[dict] = None) -> str:
    lines = [_header(report), ""]
    for entry in report.packages:
        line = _package_line(entry)
        if suffixes and entry.package.id in suffixes:
            line = f"{line} ({suffixes[entry.package.id]})"
        lines.append(line)
    return "\n".join(lines) + "\n"


def render_json(report: BundleReport) -> str:
    payload = {
        "generated_at": report.generated_at.isoformat(),
        "roots": [{"name": root.name, "version": root.version} for root in report.roots],
        "packages": list(_package_rows(report)),
        "diagnostics": report.diagnostics.as_dict(),
    }
    return json.dumps(payload, indent=2)


SOURCE_TEMPLATE = '''"""Third party libraries used by the {{ roots_name }}.

Generated by lichking on {{ generated_at }}; do not edit.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class License:
    name: str
    text: Optional[str]


@dataclass(frozen=True)
class Licenses:
    expression: str
    members: Tuple[License, ...]


@dataclass(frozen=True)
class LicensedPackage:
    name: str
    version: str
    licenses: Licenses


PACKAGES = (
{% for package in packages %}
    LicensedPackage(
        name={{ package.name | pyrepr }},
        version={{ package.version | pyrepr }},
        licenses=Licenses(
            expression={{ package.license | pyrepr }},
            members=(
{% for member in package.members %}
                License(name={{ member.name | pyrepr }}, text={{ member.text | pyrepr }}),
{% endfor %}
            ),
        ),
    ),
{% endfor %}
)
'''


def render_source(report: BundleReport) -> str:
    packages = [
        {
            "name": entry.package.name,
            "version": entry.package.version,
            "license": str(entry.license),
            "members": [
                {
                    "name": str(member.license),
                    "text": member.choice.text.text if member.choice.text else None,
                }
                for member in entry.entries
            ],
        }
        for entry in report.packages
    ]
    template = env.from_string(SOURCE_TEMPLATE)
    return template.render(
        roots_name=report.roots_name,
        generated_at=report.generated_at.isoformat(),
        packages=packages,
    )


def write_split(report: BundleReport, directory: Path) -> str:
    """Write one text file per package into ``directory``; return the listing."""

    directory.mkdir(parents=True, exist_ok=True)
    suffixes = {}
    for entry in report.packages:
        filename = split_filename(entry)
        texts = _texts(entry)
        lines = [f"{_package_line(entry)}:", ""]
        lines.extend(texts)
        (directory / filename).write_text("\n".join(lines) + "\n", encoding="utf-8")
        suffixes[entry.package.id] = f"see {directory / filename}"
    return render_name_only(report, suffixes)


def render_bundle(report: BundleReport, variant: str) -> str:
    variant = variant.lower()
    if variant == "inline":
        return render_inline(report)
    if variant in {"name-only", "split"}:
        return render_name_only(report)
    if variant == "source":
        return render_source(report)
    if variant == "json":
        return render_json(report)
    raise ValueError(f"Unknown bundle variant: {variant}")


def write_bundle(
    report: BundleReport,
    variant: str,
    destination: Path | None = None,
    directory: Path | None = None,
) -> str:
    if variant == "split":
        if directory is None:
            raise ValueError("The split bundle needs a directory for the license texts")
        output = write_split(report, directory)
    else:
        output = render_bundle(report, variant)
    if destination:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(output, encoding="utf-8")
    return output
