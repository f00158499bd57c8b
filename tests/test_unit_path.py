from __future__ import annotations

from pathlib import Path

import pytest

from contracts.errors import InvalidIdentifier
from scaffold.unit_path import (
    identifier_from_name,
    normalize_identifier,
    unit_name_for,
    unit_path_for,
)


def test_identifier_is_substituted_into_pattern() -> None:
    assert unit_name_for("07") == "day07"
    assert unit_path_for("07", Path("/work")) == Path("/work/day07")


def test_numeric_identifiers_are_padded() -> None:
    assert unit_name_for("7", pad_width=2) == "day07"
    assert unit_name_for("07", pad_width=2) == "day07"
    assert unit_name_for("125", pad_width=2) == "day125"


def test_alphanumeric_identifiers_are_not_padded() -> None:
    assert normalize_identifier("7b", pad_width=3) == "7b"


def test_custom_pattern() -> None:
    assert unit_name_for("3", pattern="puzzle-{id}-rs") == "puzzle-3-rs"


@pytest.mark.parametrize(
    "identifier",
    ["", "../01", "01/02", "a\\b", "01; rm -rf ~", "$(id)", "0 1", "é1", "x" * 33],
)
def test_unsafe_identifiers_are_rejected(identifier: str) -> None:
    with pytest.raises(InvalidIdentifier):
        unit_path_for(identifier, Path("/work"))


def test_non_string_identifier_is_rejected() -> None:
    with pytest.raises(InvalidIdentifier):
        unit_name_for(7)  # type: ignore[arg-type]


@pytest.mark.parametrize("pattern", ["day", "{id}{id}", "../day{id}", "a/{id}"])
def test_unsafe_patterns_are_rejected(pattern: str) -> None:
    with pytest.raises(InvalidIdentifier):
        unit_name_for("01", pattern=pattern)


def test_identifier_from_name_inverts_pattern() -> None:
    assert identifier_from_name("day07") == "07"
    assert identifier_from_name("puzzle-3-rs", pattern="puzzle-{id}-rs") == "3"
    assert identifier_from_name("aoc") is None
    assert identifier_from_name("day") is None
    assert identifier_from_name("day0-1") is None
