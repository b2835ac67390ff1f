"""License identifiers declared by packages.

A declared license string is parsed once into a :data:`LicenseId`: one of the
canonical :class:`KnownLicense` members, free text (:class:`Custom`), a pointer
to a license file (:class:`File`), a disjunction of the above
(:class:`Multiple`) or nothing at all (:class:`Unspecified`).

Names follow the SPDX short identifiers. A license "WITH" an exception is
treated as a license of its own, e.g. ``Apache-2.0 WITH LLVM-exception``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional, Union

LICENSE_DIR = Path(__file__).resolve().parent / "licenses"


class KnownLicense(Enum):
    """Canonical identifiers, declared in their fixed sort order."""

    UNLICENSE = "Unlicense"
    BSD_0_CLAUSE = "0BSD"
    CC0_1_0 = "CC0-1.0"
    MIT = "MIT"
    X11 = "X11"
    BSD_2_CLAUSE = "BSD-2-Clause"
    BSD_3_CLAUSE = "BSD-3-Clause"
    APACHE_2_0 = "Apache-2.0"
    APACHE_2_0_WITH_LLVM_EXCEPTION = "Apache-2.0 WITH LLVM-exception"
    LGPL_2_0 = "LGPL-2.0-only"
    LGPL_2_1 = "LGPL-2.1-only"
    LGPL_2_1_PLUS = "LGPL-2.1-or-later"
    LGPL_3_0 = "LGPL-3.0-only"
    LGPL_3_0_PLUS = "LGPL-3.0-or-later"
    MPL_1_1 = "MPL-1.1"
    MPL_2_0 = "MPL-2.0"
    GPL_2_0 = "GPL-2.0-only"
    GPL_2_0_PLUS = "GPL-2.0-or-later"
    GPL_3_0 = "GPL-3.0-only"
    GPL_3_0_PLUS = "GPL-3.0-or-later"
    AGPL_3_0 = "AGPL-3.0-only"
    AGPL_3_0_PLUS = "AGPL-3.0-or-later"
    ZLIB = "Zlib"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Custom:
    """A license string that is not one of the known identifiers."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class File:
    """License terms live in a file shipped with the package."""

    path: Path

    def __str__(self) -> str:
        return f"License specified in file ({self.path})"


@dataclass(frozen=True)
class Unspecified:
    def __str__(self) -> str:
        return "No license specified"


@dataclass(frozen=True)
class Multiple:
    """A choice between licenses (``MIT/Apache-2.0``, ``MIT OR Apache-2.0``).

    Members are flattened, sorted by :func:`license_sort_key` and
    de-duplicated on construction.
    """

    licenses: tuple = field(default_factory=tuple)

    def __post_init__(self) -> None:
        flat = list(_flatten(self.licenses))
        unique: list[LicenseId] = []
        for license in sorted(flat, key=license_sort_key):
            if not unique or unique[-1] != license:
                unique.append(license)
        object.__setattr__(self, "licenses", tuple(unique))

    def __iter__(self):
        return iter(self.licenses)

    def __len__(self) -> int:
        return len(self.licenses)

    def __str__(self) -> str:
        return " / ".join(str(license) for license in self.licenses)


LicenseId = Union[KnownLicense, Custom, File, Multiple, Unspecified]

UNSPECIFIED = Unspecified()

_KNOWN_ORDER = {member: index for index, member in enumerate(KnownLicense)}

ALIASES: dict[str, KnownLicense] = {member.value: member for member in KnownLicense}
ALIASES.update(
    {
        "LGPL-2.0": KnownLicense.LGPL_2_0,
        "LGPL-2.1": KnownLicense.LGPL_2_1,
        "LGPL-2.1+": KnownLicense.LGPL_2_1_PLUS,
        "LGPL-3.0": KnownLicense.LGPL_3_0,
        "LGPL-3.0+": KnownLicense.LGPL_3_0_PLUS,
        "GPL-2.0": KnownLicense.GPL_2_0,
        "GPL-2.0+": KnownLicense.GPL_2_0_PLUS,
        "GPL-3.0": KnownLicense.GPL_3_0,
        "GPL-3.0+": KnownLicense.GPL_3_0_PLUS,
        "AGPL-3.0": KnownLicense.AGPL_3_0,
        "AGPL-3.0+": KnownLicense.AGPL_3_0_PLUS,
    }
)

# -only and -or-later variants share the same license body. BSD-2-Clause and the
# GPL/LGPL families carry texts too, so they are scored instead of left at NoTemplate.
_TEMPLATE_FILES = {
    KnownLicense.UNLICENSE: "Unlicense.txt",
    KnownLicense.BSD_0_CLAUSE: "0BSD.txt",
    KnownLicense.MIT: "MIT.txt",
    KnownLicense.BSD_2_CLAUSE: "BSD-2-Clause.txt",
    KnownLicense.BSD_3_CLAUSE: "BSD-3-Clause.txt",
    KnownLicense.APACHE_2_0: "Apache-2.0.txt",
    KnownLicense.APACHE_2_0_WITH_LLVM_EXCEPTION: "Apache-2.0_WITH_LLVM-exception.txt",
    KnownLicense.ZLIB: "Zlib.txt",
    KnownLicense.GPL_2_0: "GPL-2.0.txt",
    KnownLicense.GPL_2_0_PLUS: "GPL-2.0.txt",
    KnownLicense.GPL_3_0: "GPL-3.0.txt",
    KnownLicense.GPL_3_0_PLUS: "GPL-3.0.txt",
    KnownLicense.LGPL_2_1: "LGPL-2.1.txt",
    KnownLicense.LGPL_2_1_PLUS: "LGPL-2.1.txt",
    KnownLicense.LGPL_3_0: "LGPL-3.0.txt",
    KnownLicense.LGPL_3_0_PLUS: "LGPL-3.0.txt",
}

_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


def _flatten(licenses: Iterable[LicenseId]) -> Iterable[LicenseId]:
    for license in licenses:
        if isinstance(license, Multiple):
            yield from _flatten(license.licenses)
        else:
            yield license


def license_sort_key(license: LicenseId) -> tuple:
    """Order licenses by declaration order, not by their display strings."""

    base = len(_KNOWN_ORDER)
    if isinstance(license, KnownLicense):
        return (_KNOWN_ORDER[license],)
    if isinstance(license, Custom):
        return (base, license.text)
    if isinstance(license, File):
        return (base + 1, str(license.path))
    if isinstance(license, Multiple):
        return (base + 2, tuple(license_sort_key(member) for member in license.licenses))
    return (base + 3,)


def parse_license(value: Optional[str]) -> LicenseId:
    if value is None:
        return UNSPECIFIED
    text = value.strip()
    if not text:
        return UNSPECIFIED

    known = ALIASES.get(text)
    if known is not None:
        return known

    # TODO: SPDX "AND" expressions are kept as Custom text.
    if "/" in text or " OR " in text:
        pieces = [piece for part in text.split("/") for piece in part.split(" OR ")]
        parsed = [parse_license(piece) for piece in pieces if piece.strip()]
        if not parsed:
            return UNSPECIFIED
        return Multiple(tuple(parsed))

    return Custom(text)


def members(license: LicenseId) -> tuple:
    """Licenses to look up text for, one per alternative."""

    if isinstance(license, Multiple):
        return license.licenses
    return (license,)


@lru_cache(maxsize=None)
def _read_template(filename: str) -> str:
    return (LICENSE_DIR / filename).read_text(encoding="utf-8")


def template(license: LicenseId) -> Optional[str]:
    """Return the reference text for ``license`` or ``None`` when there is none."""

    if not isinstance(license, KnownLicense):
        return None
    filename = _TEMPLATE_FILES.get(license)
    if filename is None:
        return None
    return _read_template(filename)


def slugify(text: str) -> str:
    return _SLUG_SEPARATORS.sub("-", text.lower()).strip("-")


def synonyms(license: LicenseId) -> list[str]:
    """Slugified names a license file may carry, longest (most specific) first."""

    if isinstance(license, File):
        values = [slugify(license.path.name)]
    else:
        values = [slugify(str(license))]
    if license is KnownLicense.APACHE_2_0:
        values.extend(["apache", "apache2", "apache-2"])
    return sorted(values, key=len, reverse=True)
