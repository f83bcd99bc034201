import pytest

from selfupgrade.core.errors import InvalidVersionError
from selfupgrade.core.semver import SemanticVersion


def test_parse_canonical_round_trip():
    for text in ("0.36.0", "1.2.3-rc.1", "1.2.3+build.5", "10.0.1-alpha.beta+exp.sha.5114f85"):
        assert str(SemanticVersion.parse(text)) == text


def test_parse_strips_surrounding_whitespace():
    assert str(SemanticVersion.parse(" 1.4.0\n")) == "1.4.0"


@pytest.mark.parametrize("text", ["", "1.2", "v1.2.3", "01.2.3", "1.2.3-", "1.2.3-01", "1.2.x", "1.2.3 4"])
def test_parse_rejects_invalid(text):
    with pytest.raises(InvalidVersionError):
        SemanticVersion.parse(text)


def test_ordering_follows_semver_precedence():
    ordered = [
        "1.0.0-alpha",
        "1.0.0-alpha.1",
        "1.0.0-alpha.beta",
        "1.0.0-beta",
        "1.0.0-beta.2",
        "1.0.0-beta.11",
        "1.0.0-rc.1",
        "1.0.0",
        "1.0.1",
        "1.1.0",
        "2.0.0",
    ]
    versions = [SemanticVersion.parse(v) for v in ordered]
    assert sorted(reversed(versions)) == versions
    assert versions[0] < versions[-1]
    assert versions[-1] >= versions[-2]


def test_build_metadata_ignored_for_equality_and_order():
    a = SemanticVersion.parse("1.2.3+linux")
    b = SemanticVersion.parse("1.2.3+darwin")
    assert a == b
    assert not a < b and not b < a
    assert hash(a) == hash(b)
    assert str(a) == "1.2.3+linux"
