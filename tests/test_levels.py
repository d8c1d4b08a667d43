from __future__ import annotations

import pytest

from scoring.levels import coerce_level, normalize_level, required_level_or_default


@pytest.mark.parametrize(
    "label, expected",
    [
        ("Basic", 1),
        ("foundation", 1),
        ("Beginner", 1),
        ("Intermediate", 2),
        ("Proficient", 3),
        ("advanced", 4),
        ("Expert", 5),
        ("Leadership", 5),
        ("MASTER", 5),
    ],
)
def test_known_labels(label, expected):
    assert normalize_level(label) == expected


def test_labels_are_trimmed_and_case_insensitive():
    assert normalize_level("  ExPeRt \n") == 5


@pytest.mark.parametrize("label", ["", None, "guru", "level 3", "   "])
def test_unknown_labels_are_zero(label):
    assert normalize_level(label) == 0


def test_coerce_clamps_numeric_levels():
    assert coerce_level(3) == 3
    assert coerce_level(9) == 5
    assert coerce_level(-2) == 0
    assert coerce_level(4.7) == 4
    assert coerce_level(True) == 0
    assert coerce_level("Advanced") == 4


def test_required_level_defaults_to_intermediate():
    assert required_level_or_default(None) == 2
    assert required_level_or_default("  ") == 2
    assert required_level_or_default("expert") == 5
    # An explicit but unrecognized label is not the same as an omitted one.
    assert required_level_or_default("guru") == 0
