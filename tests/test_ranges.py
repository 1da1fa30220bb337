from __future__ import annotations

import logging

import pytest

from pdf_editor.ranges import (
    EXAMPLE_RULES,
    format_rule,
    parse_merge_rules,
    rules_for_every_page,
)
from pdf_editor.types import MergeRule


def test_parse_example_rules() -> None:
    rules = parse_merge_rules(EXAMPLE_RULES, 10)
    assert rules == [MergeRule(0, 1), MergeRule(2, 2), MergeRule(3, 8), MergeRule(9, 9)]


def test_parse_trims_whitespace_and_skips_empty_tokens() -> None:
    assert parse_merge_rules(" 1 - 3 ,, 5 ,", 5) == [MergeRule(0, 2), MergeRule(4, 4)]


def test_parse_keeps_order_duplicates_and_overlaps() -> None:
    rules = parse_merge_rules("3,1-2,2-3,3", 3)
    assert rules == [MergeRule(2, 2), MergeRule(0, 1), MergeRule(1, 2), MergeRule(2, 2)]


@pytest.mark.parametrize(
    "text",
    ["0", "11", "5-3", "0-2", "9-11", "abc", "a-3", "-", "", "   "],
)
def test_parse_drops_invalid_tokens(text: str) -> None:
    assert parse_merge_rules(text, 10) == []


def test_parse_accepts_leading_digits() -> None:
    assert parse_merge_rules("3abc,4x-5y", 10) == [MergeRule(2, 2), MergeRule(3, 4)]


def test_parse_mixed_valid_and_invalid(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="pdf_editor.ranges"):
        rules = parse_merge_rules("1,99,2-1,x,4", 5)

    assert rules == [MergeRule(0, 0), MergeRule(3, 3)]
    assert len([record for record in caplog.records if record.levelno == logging.WARNING]) == 3


def test_parse_against_empty_document() -> None:
    assert parse_merge_rules("1", 0) == []


@pytest.mark.parametrize("text", ["1-5,2,3-4,5", "1,2,3", "2-2,1-5", "9,1-1000,3-x"])
def test_parsed_rules_are_always_in_bounds(text: str) -> None:
    for rule in parse_merge_rules(text, 5):
        assert 0 <= rule.start <= rule.end < 5


def test_rules_for_every_page() -> None:
    assert rules_for_every_page(3) == [MergeRule(0, 0), MergeRule(1, 1), MergeRule(2, 2)]
    assert rules_for_every_page(0) == []


def test_format_rule() -> None:
    assert format_rule(MergeRule(3, 8)) == "4-9"
    assert format_rule(MergeRule(2, 2)) == "3"


def test_merge_rule_indices() -> None:
    rule = MergeRule(1, 3)
    assert rule.indices() == [1, 2, 3]
    assert len(rule) == 3
