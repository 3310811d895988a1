"""Tests for the ordered interaction rule table."""

import pytest

from constants import DEFAULT_GROUPS, DEFAULT_RULES
from rules import Rule, RuleTable
from utils import ConfigurationError


@pytest.fixture
def table():
    return RuleTable(DEFAULT_RULES, DEFAULT_GROUPS)


def test_lookup_returns_configured_coefficients(table):
    assert table.lookup("red", "red") == 0.1
    assert table.lookup("yellow", "red") == 0.15
    assert table.lookup("green", "green") == -0.7


def test_missing_pairs_resolve_to_zero(table):
    assert table.lookup("yellow", "green") == 0.0
    assert table.lookup("green", "yellow") == 0.0
    assert table.lookup("red", "yellow") == 0.0


def test_lookup_is_total_for_unknown_names(table):
    assert table.lookup("blue", "red") == 0.0


def test_asymmetric_entries_are_kept_apart(table):
    assert table.lookup("green", "red") == -0.2
    assert table.lookup("red", "green") == -0.1


def test_iteration_preserves_construction_order(table):
    assert [tuple(rule) for rule in table] == [tuple(r) for r in DEFAULT_RULES]
    assert len(table) == 6
    assert all(isinstance(rule, Rule) for rule in table)


def test_accepts_mapping_entries():
    table = RuleTable([{"source": "a", "target": "b", "g": 2}], ["a", "b"])
    assert table.lookup("a", "b") == 2.0
    assert table.groups == {"a", "b"}


@pytest.mark.parametrize("entry", [
    ["red", "blue", 0.1],
    ["red", "red"],
    {"source": "red", "g": 0.1},
    ["red", "red", "strong"],
    ["red", "red", float("nan")],
    ["red", "red", True],
    "red->red",
])
def test_malformed_entries_fail_fast(entry):
    with pytest.raises(ConfigurationError):
        RuleTable([entry], DEFAULT_GROUPS)


def test_duplicate_pair_is_rejected():
    with pytest.raises(ConfigurationError, match="more than once"):
        RuleTable([["red", "red", 0.1], ["red", "red", 0.2]], DEFAULT_GROUPS)
