"""Can a package under one license include a dependency under another?

The answer is three-valued: :attr:`Inclusion.UNKNOWN` covers custom license
strings, license files and combinations nobody has classified yet. Known
pairs are looked up in :data:`COMPATIBILITY`, a hand-maintained table of
allowed edges; any known pair missing from it is disallowed.

This is a heuristic, not legal advice.
"""

from __future__ import annotations

from enum import Enum

from .license import UNSPECIFIED, Custom, File, KnownLicense, LicenseId, Multiple, Unspecified

K = KnownLicense


class Inclusion(Enum):
    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"


_PUBLIC = frozenset({K.UNLICENSE, K.BSD_0_CLAUSE, K.CC0_1_0, K.MIT, K.X11})
_BSD = _PUBLIC | {K.BSD_2_CLAUSE, K.BSD_3_CLAUSE}
_LGPL_2_1 = _BSD | {K.MPL_2_0, K.LGPL_2_1_PLUS, K.LGPL_2_1}
_LGPL_3_0_PLUS = _BSD | {K.MPL_2_0, K.APACHE_2_0, K.LGPL_2_1_PLUS, K.LGPL_3_0_PLUS}
_GPL_2_0_PLUS = _LGPL_2_1 | {K.GPL_2_0_PLUS}
_GPL_3_0_PLUS = _GPL_2_0_PLUS | {K.APACHE_2_0, K.GPL_3_0_PLUS}
_GPL_3_0 = _GPL_3_0_PLUS | {K.GPL_3_0}
_AGPL_3_0_PLUS = _GPL_3_0 | {K.AGPL_3_0_PLUS}

COMPATIBILITY: dict[KnownLicense | Unspecified, frozenset[KnownLicense]] = {
    UNSPECIFIED: frozenset({K.UNLICENSE, K.MIT, K.X11, K.BSD_2_CLAUSE, K.BSD_3_CLAUSE}),
    K.LGPL_2_0: frozenset({K.LGPL_2_0}),
    K.UNLICENSE: _PUBLIC,
    K.BSD_0_CLAUSE: _PUBLIC,
    K.CC0_1_0: _PUBLIC,
    K.MIT: _PUBLIC,
    K.X11: _PUBLIC,
    K.BSD_2_CLAUSE: _BSD,
    K.BSD_3_CLAUSE: _BSD,
    K.APACHE_2_0: _BSD | {K.APACHE_2_0},
    K.MPL_1_1: _BSD | {K.MPL_1_1},
    K.MPL_2_0: _BSD | {K.APACHE_2_0, K.MPL_2_0},
    K.LGPL_2_1_PLUS: _BSD | {K.MPL_2_0, K.LGPL_2_1_PLUS},
    K.LGPL_2_1: _LGPL_2_1,
    K.LGPL_3_0_PLUS: _LGPL_3_0_PLUS,
    K.LGPL_3_0: _LGPL_3_0_PLUS | {K.LGPL_3_0},
    K.GPL_2_0_PLUS: _GPL_2_0_PLUS,
    K.GPL_2_0: _GPL_2_0_PLUS | {K.GPL_2_0},
    K.GPL_3_0_PLUS: _GPL_3_0_PLUS,
    K.GPL_3_0: _GPL_3_0,
    K.AGPL_3_0_PLUS: _AGPL_3_0_PLUS,
    K.AGPL_3_0: _AGPL_3_0_PLUS | {K.AGPL_3_0},
    # Not classified yet.
    K.APACHE_2_0_WITH_LLVM_EXCEPTION: frozenset({K.MIT}),
    K.ZLIB: frozenset({K.MIT}),
}

LICENSE_CATEGORIES = {
    **{license: "permissive" for license in _BSD},
    K.APACHE_2_0: "permissive",
    K.APACHE_2_0_WITH_LLVM_EXCEPTION: "permissive",
    K.ZLIB: "permissive",
    K.MPL_1_1: "weak_copyleft",
    K.MPL_2_0: "weak_copyleft",
    K.LGPL_2_0: "weak_copyleft",
    K.LGPL_2_1: "weak_copyleft",
    K.LGPL_2_1_PLUS: "weak_copyleft",
    K.LGPL_3_0: "weak_copyleft",
    K.LGPL_3_0_PLUS: "weak_copyleft",
    K.GPL_2_0: "copyleft",
    K.GPL_2_0_PLUS: "copyleft",
    K.GPL_3_0: "copyleft",
    K.GPL_3_0_PLUS: "copyleft",
    K.AGPL_3_0: "network_copyleft",
    K.AGPL_3_0_PLUS: "network_copyleft",
}


def categorize_license(license: LicenseId) -> str:
    if isinstance(license, Multiple):
        categories = {categorize_license(member) for member in license}
        return categories.pop() if len(categories) == 1 else "mixed"
    if isinstance(license, Unspecified):
        return "unspecified"
    return LICENSE_CATEGORIES.get(license, "unknown")


def can_include(consumer: LicenseId, dependency: LicenseId) -> Inclusion:
    """Decide whether code under ``consumer`` may include code under ``dependency``.

    A multiple consumer must be able to include the dependency under every
    one of its licenses; a multiple dependency only needs one acceptable
    alternative.
    """

    if isinstance(dependency, Unspecified):
        return Inclusion.NO

    if isinstance(consumer, (Custom, File)) or isinstance(dependency, (Custom, File)):
        return Inclusion.UNKNOWN

    if isinstance(consumer, Multiple):
        verdicts = [can_include(member, dependency) for member in consumer]
        if Inclusion.NO in verdicts:
            return Inclusion.NO
        if Inclusion.UNKNOWN in verdicts:
            return Inclusion.UNKNOWN
        return Inclusion.YES

    if isinstance(dependency, Multiple):
        seen_unknown = False
        for member in dependency:
            verdict = can_include(consumer, member)
            if verdict is Inclusion.YES:
                return Inclusion.YES
            if verdict is Inclusion.UNKNOWN:
                seen_unknown = True
        return Inclusion.UNKNOWN if seen_unknown else Inclusion.NO

    # LGPL-2.0 compatibility has not been worked out.
    if consumer is K.LGPL_2_0 or dependency is K.LGPL_2_0:
        return Inclusion.UNKNOWN

    if dependency in COMPATIBILITY.get(consumer, frozenset()):
        return Inclusion.YES
    return Inclusion.NO
