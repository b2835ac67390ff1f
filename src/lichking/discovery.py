"""Find the license texts shipped inside a package directory.

Candidate files are matched by name and then scored against the canonical
template of the license with a bag-of-words comparison: the number of word
occurrences that differ between the file and the template, relative to the
size of the template.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from .errors import DiscoveryIoError
from .license import File, LicenseId, Multiple, slugify, synonyms, template

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE_LIMIT = 0.10
LOW_CONFIDENCE_LIMIT = 0.15

GENERIC_LICENSE_NAMES = {"LICENSE", "LICENCE", "LICENSE.MD", "LICENSE.TXT"}

_WORD = re.compile(r"\w+")


class Confidence(IntEnum):
    """How closely a candidate text matches its template; higher is better."""

    NO_TEMPLATE = 0
    UNSURE = 1
    SEMI_CONFIDENT = 2
    CONFIDENT = 3

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


@dataclass
class LicenseText:
    path: Path
    text: str
    confidence: Confidence


def word_frequencies(text: str) -> Counter:
    return Counter(word.lower() for word in _WORD.findall(text))


@lru_cache(maxsize=32)
def _template_frequencies(reference: str) -> Counter:
    return word_frequencies(reference)


def count_errors(text_freq: Counter, template_freq: Counter) -> int:
    remaining = dict(text_freq)
    errors = 0
    for word, count in template_freq.items():
        errors += abs(remaining.pop(word, 0) - count)
    errors += sum(remaining.values())
    return errors


def score_text(text: str, reference: str) -> float:
    """Return the error ratio of ``text`` against ``reference`` (0.0 is identical)."""

    template_freq = _template_frequencies(reference)
    total = sum(template_freq.values())
    if total == 0:
        return float("inf")
    return count_errors(word_frequencies(text), template_freq) / total


def confidence_for_score(score: float) -> Confidence:
    if score < HIGH_CONFIDENCE_LIMIT:
        return Confidence.CONFIDENT
    if score < LOW_CONFIDENCE_LIMIT:
        return Confidence.SEMI_CONFIDENT
    return Confidence.UNSURE


def check_against_template(text: str, license: LicenseId) -> Confidence:
    if isinstance(license, Multiple):
        raise ValueError("Score each member of a multiple license against its own template")
    reference = template(license)
    if reference is None:
        return Confidence.NO_TEMPLATE
    return confidence_for_score(score_text(text, reference))


def is_generic_license_name(name: str) -> bool:
    return name.upper() in GENERIC_LICENSE_NAMES


def name_matches(name: str, license: LicenseId) -> bool:
    if isinstance(license, File):
        return name.lower() == license.path.name.lower()
    slug = slugify(name)
    for synonym in synonyms(license):
        if not synonym:
            continue
        if slug == synonym or ("license" in slug and synonym in slug):
            return True
    return False


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Skipping unreadable license file %s: %s", path, exc)
        return None


def find_license_texts(directory: Path, license: LicenseId) -> List[LicenseText]:
    """Collect and score candidate texts for one (non-multiple) license.

    Files named after the license win; a generic ``LICENSE`` style file is
    only used when nothing more specific exists. Entries are visited in
    filename order, so the first readable generic file is the one kept.
    """

    if isinstance(license, Multiple):
        raise ValueError("Look up texts for each member of a multiple license separately")

    directory = Path(directory)
    try:
        entries = sorted(directory.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise DiscoveryIoError(directory, exc) from exc

    texts: List[LicenseText] = []
    generic: Optional[tuple[Path, str]] = None
    for path in entries:
        if name_matches(path.name, license):
            text = _read_text(path)
            if text is not None:
                texts.append(LicenseText(path, text, check_against_template(text, license)))
        elif generic is None and is_generic_license_name(path.name):
            text = _read_text(path)
            if text is not None:
                generic = (path, text)

    if not texts and generic is not None:
        path, text = generic
        texts.append(LicenseText(path, text, check_against_template(text, license)))

    logger.debug("Found %d candidate text(s) for %s in %s", len(texts), license, directory)
    return texts
