"""Parsing of human-entered page range strings into :class:`MergeRule` lists."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from .types import MergeRule

LOGGER = logging.getLogger("pdf_editor.ranges")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

EXAMPLE_RULES = "1-2,3,4-9,10"


def _parse_page_number(text: str) -> Optional[int]:
    """Parse the leading integer of ``text``; trailing characters are ignored."""

    match = _LEADING_INT.match(text)
    if not match:
        return None
    return int(match.group(1))


def parse_merge_rules(text: str, max_page: int) -> List[MergeRule]:
    """Parse ``text`` into zero-based rules valid for a document of ``max_page`` pages.

    Tokens are comma separated and 1-based: ``"a-b"`` is an inclusive range and
    ``"a"`` a single page. Invalid or out-of-bounds tokens are dropped, so the
    result may be shorter than the number of tokens (or empty). Rules keep the
    input order and are never merged.

    >>> parse_merge_rules("1-2,3,4-9,10", 10)
    [MergeRule(start=0, end=1), MergeRule(start=2, end=2), MergeRule(start=3, end=8), MergeRule(start=9, end=9)]
    """

    rules: List[MergeRule] = []
    tokens = [token.strip() for token in (text or "").split(",")]

    for token in (token for token in tokens if token):
        if "-" in token:
            parts = [part.strip() for part in token.split("-")]
            start_num = _parse_page_number(parts[0])
            end_num = _parse_page_number(parts[1])
            if start_num is None or end_num is None:
                LOGGER.warning("Dropping unparsable range token '%s'", token)
                continue
            start, end = start_num - 1, end_num - 1
            if start < 0 or end >= max_page or start > end:
                LOGGER.warning("Dropping out-of-bounds range token '%s' (pages: %d)", token, max_page)
                continue
            rules.append(MergeRule(start, end))
        else:
            page_num = _parse_page_number(token)
            if page_num is None:
                LOGGER.warning("Dropping unparsable page token '%s'", token)
                continue
            index = page_num - 1
            if index < 0 or index >= max_page:
                LOGGER.warning("Dropping out-of-bounds page token '%s' (pages: %d)", token, max_page)
                continue
            rules.append(MergeRule(index, index))

    LOGGER.debug("Parsed %d rule(s) from '%s'", len(rules), text)
    return rules


def rules_for_every_page(page_count: int) -> List[MergeRule]:
    """Return one single-page rule per page."""

    return [MergeRule(index, index) for index in range(page_count)]


def format_rule(rule: MergeRule) -> str:
    """Return the 1-based label of ``rule`` (``"4-9"`` or ``"3"``)."""

    if rule.start == rule.end:
        return str(rule.start + 1)
    return f"{rule.start + 1}-{rule.end + 1}"


__all__ = [
    "EXAMPLE_RULES",
    "parse_merge_rules",
    "rules_for_every_page",
    "format_rule",
]
