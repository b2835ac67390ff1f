from pathlib import Path

from lichking.compatibility import COMPATIBILITY, Inclusion, can_include, categorize_license
from lichking.license import UNSPECIFIED, Custom, File, KnownLicense, Multiple, parse_license

K = KnownLicense


def test_known_pairs():
    assert can_include(K.MIT, K.MIT) is Inclusion.YES
    assert can_include(K.MIT, parse_license("GPL-3.0")) is Inclusion.NO
    assert can_include(K.GPL_3_0_PLUS, K.MIT) is Inclusion.YES
    assert can_include(K.APACHE_2_0, K.APACHE_2_0) is Inclusion.YES
    assert can_include(K.APACHE_2_0, K.MPL_2_0) is Inclusion.NO
    assert can_include(K.GPL_2_0, K.APACHE_2_0) is Inclusion.NO
    assert can_include(K.AGPL_3_0, K.GPL_3_0) is Inclusion.YES


def test_unknown_for_custom_and_file_licenses():
    assert can_include(Custom("Foo"), K.MIT) is Inclusion.UNKNOWN
    assert can_include(K.MIT, Custom("Foo")) is Inclusion.UNKNOWN
    assert can_include(K.MIT, File(Path("LICENSE"))) is Inclusion.UNKNOWN


def test_unspecified_dependency_is_never_included():
    for consumer in [*K, Custom("Foo"), UNSPECIFIED, parse_license("MIT/Apache-2.0")]:
        assert can_include(consumer, UNSPECIFIED) is Inclusion.NO


def test_unspecified_consumer_only_takes_plain_permissive_licenses():
    assert can_include(UNSPECIFIED, K.MIT) is Inclusion.YES
    assert can_include(UNSPECIFIED, K.BSD_3_CLAUSE) is Inclusion.YES
    assert can_include(UNSPECIFIED, K.APACHE_2_0) is Inclusion.NO


def test_multiple_consumer_needs_every_member():
    assert can_include(Multiple((K.MIT, K.APACHE_2_0)), K.GPL_2_0) is Inclusion.NO
    assert can_include(Multiple((K.MIT, K.APACHE_2_0)), K.MIT) is Inclusion.YES
    # A definite NO outranks an unknown member.
    assert can_include(Multiple((K.MIT, Custom("Foo"))), K.GPL_3_0) is Inclusion.NO
    assert can_include(Multiple((K.MIT, Custom("Foo"))), K.MIT) is Inclusion.UNKNOWN


def test_multiple_dependency_needs_one_member():
    assert can_include(K.MIT, Multiple((K.GPL_2_0, K.MIT))) is Inclusion.YES
    assert can_include(K.MIT, Multiple((K.GPL_2_0, Custom("Foo")))) is Inclusion.UNKNOWN
    assert can_include(K.MIT, Multiple((K.GPL_2_0, K.GPL_3_0))) is Inclusion.NO


def test_lgpl_2_0_is_unclassified():
    assert can_include(K.LGPL_2_0, K.MIT) is Inclusion.UNKNOWN
    assert can_include(K.GPL_3_0, K.LGPL_2_0) is Inclusion.UNKNOWN


def test_unclassified_consumers_only_take_mit():
    assert can_include(K.ZLIB, K.MIT) is Inclusion.YES
    assert can_include(K.ZLIB, K.BSD_3_CLAUSE) is Inclusion.NO
    assert can_include(K.APACHE_2_0_WITH_LLVM_EXCEPTION, K.MIT) is Inclusion.YES


def test_every_known_license_includes_itself_where_tabled():
    for consumer, allowed in COMPATIBILITY.items():
        if consumer in allowed and consumer is not K.LGPL_2_0:
            assert can_include(consumer, consumer) is Inclusion.YES


def test_unknown_is_its_own_verdict():
    verdict = can_include(K.MIT, Custom("Foo"))
    assert verdict is Inclusion.UNKNOWN
    assert verdict is not Inclusion.YES
    assert verdict is not Inclusion.NO


def test_license_categories():
    assert categorize_license(K.MIT) == "permissive"
    assert categorize_license(K.LGPL_2_1) == "weak_copyleft"
    assert categorize_license(K.AGPL_3_0_PLUS) == "network_copyleft"
    assert categorize_license(Custom("Foo")) == "unknown"
    assert categorize_license(UNSPECIFIED) == "unspecified"
    assert categorize_license(parse_license("MIT/Apache-2.0")) == "permissive"
    assert categorize_license(parse_license("MIT/GPL-3.0")) == "mixed"
