"""Pure index computations over page counts and selections.

Nothing in this module touches PDF bytes; every function takes the page
count and the caller's intent and returns the index list an engine
operation should consume.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .exceptions import DeleteAllPagesError, InvalidPermutationError, PageOutOfBoundsError
from .types import SelectionSet

Permutation = List[int]


# ----------------------------------------------------------------------
# Selection helpers
# ----------------------------------------------------------------------
def selected_indices(selection: SelectionSet, doc_id: str, *, ordered: bool = True) -> List[int]:
    """Page indices of ``doc_id`` in ``selection``.

    Ascending by default so range-sensitive operations (rotation,
    extraction) produce pages in displayed order; ``ordered=False`` keeps
    insertion order.
    """

    indices = [index for key_doc, index in selection if key_doc == doc_id]
    return sorted(indices) if ordered else indices


def toggle_selection(selection: SelectionSet, doc_id: str, page_index: int) -> SelectionSet:
    key = (doc_id, page_index)
    if key in selection:
        return SelectionSet(tuple(k for k in selection if k != key))
    return SelectionSet(selection.keys + (key,))


def select_all(doc_id: str, page_count: int) -> SelectionSet:
    """Selection holding every page of one document (and nothing else)."""

    return SelectionSet(tuple((doc_id, index) for index in range(page_count)))


def drop_document_selection(selection: SelectionSet, doc_id: str) -> SelectionSet:
    return SelectionSet(tuple(key for key in selection if key[0] != doc_id))


# ----------------------------------------------------------------------
# Index sets
# ----------------------------------------------------------------------
def validate_indices(indices: Iterable[int], page_count: int) -> List[int]:
    """Return ``indices`` as a list, raising if any falls outside the document."""

    checked = list(indices)
    for index in checked:
        if index < 0 or index >= page_count:
            raise PageOutOfBoundsError(
                f"Page index {index} is out of bounds. Document has {page_count} pages."
            )
    return checked


def remaining_indices(page_count: int, remove: Iterable[int]) -> List[int]:
    """Ascending indices left after removing ``remove``.

    Raises:
        DeleteAllPagesError: If no page would remain.
    """

    removed = set(remove)
    keep = [index for index in range(page_count) if index not in removed]
    if not keep:
        raise DeleteAllPagesError(
            f"Cannot delete all {page_count} page(s); at least one page must remain."
        )
    return keep


# ----------------------------------------------------------------------
# Permutations
# ----------------------------------------------------------------------
def identity_permutation(page_count: int) -> Permutation:
    return list(range(page_count))


def validate_permutation(order: Sequence[int], page_count: int) -> Permutation:
    """Return ``order`` as a list if it is a bijection on ``[0, page_count)``."""

    checked = list(order)
    if len(checked) != page_count or sorted(checked) != list(range(page_count)):
        raise InvalidPermutationError(
            f"Order {checked} is not a permutation of {page_count} page(s)."
        )
    return checked


def move_permutation(page_count: int, from_index: int, to_index: int) -> Permutation:
    """Permutation that moves the page at ``from_index`` to ``to_index``."""

    validate_indices((from_index, to_index), page_count)
    order = identity_permutation(page_count)
    if from_index == to_index:
        return order
    moved = order.pop(from_index)
    order.insert(to_index, moved)
    return order


def compose_permutations(first: Sequence[int], second: Sequence[int]) -> Permutation:
    """Single permutation equivalent to applying ``first`` then ``second``.

    Both are copy orders: ``result[i]`` is the original index of the page
    that ends up at position ``i``.
    """

    if len(first) != len(second):
        raise InvalidPermutationError(
            f"Cannot compose permutations of different sizes ({len(first)} and {len(second)})."
        )
    validate_permutation(second, len(first))
    return [first[index] for index in second]


__all__ = [
    "Permutation",
    "selected_indices",
    "toggle_selection",
    "select_all",
    "drop_document_selection",
    "validate_indices",
    "remaining_indices",
    "identity_permutation",
    "validate_permutation",
    "move_permutation",
    "compose_permutations",
]
