from collections import Counter
from pathlib import Path

import pytest

from lichking.choice import choose
from lichking.discovery import (
    Confidence,
    check_against_template,
    confidence_for_score,
    count_errors,
    find_license_texts,
    is_generic_license_name,
    name_matches,
    score_text,
    word_frequencies,
)
from lichking.errors import DiscoveryIoError
from lichking.license import Custom, File, KnownLicense, parse_license


def test_word_frequencies_ignore_case_and_punctuation():
    assert word_frequencies("The the, THE cat!") == Counter({"the": 3, "cat": 1})


def test_count_errors_is_symmetric_difference_of_counts():
    assert count_errors(Counter("abb"), Counter("abc")) == 2
    assert count_errors(Counter(), Counter("abc")) == 3


def test_identical_text_scores_zero_and_is_confident(mit_text: str):
    assert score_text(mit_text, mit_text) == 0
    assert check_against_template(mit_text, KnownLicense.MIT) is Confidence.CONFIDENT


def test_disjoint_text_is_unsure(mit_text: str):
    assert score_text("zebra " * 3, mit_text) >= 1
    assert check_against_template("zebra " * 3, KnownLicense.MIT) is Confidence.UNSURE


def test_confidence_bands(mit_text: str):
    assert confidence_for_score(0.0999) is Confidence.CONFIDENT
    assert confidence_for_score(0.10) is Confidence.SEMI_CONFIDENT
    assert confidence_for_score(0.15) is Confidence.UNSURE

    # The MIT template holds 170 words.
    assert check_against_template(mit_text + " extra" * 5, KnownLicense.MIT) is Confidence.CONFIDENT
    assert check_against_template(mit_text + " extra" * 20, KnownLicense.MIT) is Confidence.SEMI_CONFIDENT
    assert check_against_template(mit_text + " extra" * 30, KnownLicense.MIT) is Confidence.UNSURE


def test_word_free_template_is_unsure():
    assert score_text("anything", "!!!") == float("inf")
    assert confidence_for_score(float("inf")) is Confidence.UNSURE


def test_no_template_and_multiple_licenses():
    assert check_against_template("whatever", Custom("Foo")) is Confidence.NO_TEMPLATE
    with pytest.raises(ValueError):
        check_against_template("whatever", parse_license("MIT/Apache-2.0"))


def test_name_matching():
    assert name_matches("LICENSE-MIT", KnownLicense.MIT)
    assert name_matches("mit", KnownLicense.MIT)
    assert name_matches("LICENSE-APACHE", KnownLicense.APACHE_2_0)
    assert not name_matches("LICENSE-APACHE", KnownLicense.MIT)
    assert not name_matches("README.md", KnownLicense.MIT)
    assert name_matches("COPYRIGHT.md", File(Path("COPYRIGHT.md")))
    assert is_generic_license_name("License.txt")
    assert not is_generic_license_name("COPYING")


def test_find_specific_texts(tmp_path: Path, mit_text: str):
    (tmp_path / "LICENSE-MIT").write_text(mit_text)
    (tmp_path / "LICENSE-APACHE").write_text("Apache License Version 2.0")
    (tmp_path / "README.md").write_text("hello")

    texts = find_license_texts(tmp_path, KnownLicense.MIT)
    assert [text.path.name for text in texts] == ["LICENSE-MIT"]
    assert texts[0].confidence is Confidence.CONFIDENT

    apache = find_license_texts(tmp_path, KnownLicense.APACHE_2_0)
    assert [text.path.name for text in apache] == ["LICENSE-APACHE"]
    assert apache[0].confidence is Confidence.UNSURE


def test_generic_file_is_only_a_fallback(tmp_path: Path, mit_text: str):
    (tmp_path / "LICENSE").write_text(mit_text)
    texts = find_license_texts(tmp_path, KnownLicense.MIT)
    assert [text.path.name for text in texts] == ["LICENSE"]
    assert texts[0].confidence is Confidence.CONFIDENT

    (tmp_path / "LICENSE-MIT").write_text(mit_text)
    texts = find_license_texts(tmp_path, KnownLicense.MIT)
    assert [text.path.name for text in texts] == ["LICENSE-MIT"]


def test_first_generic_file_in_name_order_wins(tmp_path: Path):
    (tmp_path / "LICENSE.md").write_text("markdown terms")
    (tmp_path / "LICENSE").write_text("plain terms")

    texts = find_license_texts(tmp_path, Custom("Foo"))
    assert len(texts) == 1
    assert texts[0].path.name == "LICENSE"
    assert texts[0].confidence is Confidence.NO_TEMPLATE


def test_license_file_reference(tmp_path: Path):
    (tmp_path / "COPYRIGHT.md").write_text("All rights reserved")
    texts = find_license_texts(tmp_path, File(Path("COPYRIGHT.md")))
    assert [text.text for text in texts] == ["All rights reserved"]
    assert texts[0].confidence is Confidence.NO_TEMPLATE


def test_license_file_reference_needs_the_exact_name(tmp_path: Path):
    (tmp_path / "LICENSE").write_text("Our own terms")
    (tmp_path / "LICENSE-THIRD-PARTY").write_text("Vendored terms")
    (tmp_path / "LICENSE-MIT").write_text("MIT terms")

    texts = find_license_texts(tmp_path, File(Path("LICENSE")))
    assert [text.path.name for text in texts] == ["LICENSE"]
    assert not name_matches("LICENSE-THIRD-PARTY", File(Path("LICENSE")))
    assert name_matches("license", File(Path("LICENSE")))

    choice = choose(texts)
    assert not choice.ambiguous
    assert not choice.low_quality_license


def test_unreadable_candidates_are_skipped(tmp_path: Path):
    (tmp_path / "LICENSE-MIT").write_bytes(b"\xff\xfe\xfa not utf-8")
    assert find_license_texts(tmp_path, KnownLicense.MIT) == []


def test_missing_directory_raises(tmp_path: Path):
    with pytest.raises(DiscoveryIoError):
        find_license_texts(tmp_path / "nope", KnownLicense.MIT)
