"""Property tests for the duplicate-row tie-break rules."""

from dataclasses import dataclass

import pytest
from hypothesis import given
from hypothesis import strategies as st

from src.studio.services import Resolution, collapse_duplicates, select_canonical

pytestmark = pytest.mark.unit


@dataclass(frozen=True)
class Row:
    id: int
    row_id: int


rows_strategy = st.lists(st.integers(min_value=0, max_value=5), max_size=30).map(
    lambda ids: [Row(id=i, row_id=n) for n, i in enumerate(ids)]
)


def test_empty_has_no_canonical_row():
    assert select_canonical([]) is None


@given(rows=rows_strategy.filter(bool))
def test_first_row_in_store_order_wins(rows: list[Row]):
    assert select_canonical(rows) is rows[0]


@given(rows=rows_strategy)
def test_selection_is_stable(rows: list[Row]):
    assert select_canonical(rows) is select_canonical(list(rows))


@given(rows=rows_strategy)
def test_collapse_keeps_first_row_per_id(rows: list[Row]):
    collapsed = collapse_duplicates(rows)

    assert [r.id for r in collapsed] == list(dict.fromkeys(r.id for r in rows))
    for row in collapsed:
        assert row is next(r for r in rows if r.id == row.id)


@given(rows=rows_strategy)
def test_collapse_is_idempotent(rows: list[Row]):
    once = collapse_duplicates(rows)
    assert collapse_duplicates(once) == once


def test_collapse_with_custom_key():
    rows = [Row(id=1, row_id=0), Row(id=2, row_id=0), Row(id=3, row_id=1)]
    assert collapse_duplicates(rows, key=lambda r: r.row_id) == [rows[0], rows[2]]


def test_resolution_ambiguity():
    assert not Resolution(entity="x", candidates=1).ambiguous
    assert Resolution(entity="x", candidates=3).ambiguous
