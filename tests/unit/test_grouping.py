# tests/unit/test_grouping.py
"""针对 `lingua_sync.grouping` 的单元测试。"""

import pytest

from lingua_sync.core.types import PendingRow
from lingua_sync.grouping import UNGROUPED, BatchGrouper, chunked
from tests.helpers.factories import pending_row, pending_rows


def _flatten(buckets: dict) -> list[PendingRow]:
    return [row for chunks in buckets.values() for chunk in chunks for row in chunk]


def test_groups_by_target_and_chunks() -> None:
    """3 行 {(h1,es),(h2,es),(h3,fr)}，批次大小 2 → es:[[h1,h2]], fr:[[h3]]。"""
    rows = pending_rows([("h1", "es"), ("h2", "es"), ("h3", "fr")])
    buckets = BatchGrouper(batch_size=2).group(rows)

    assert list(buckets) == [("en", "es"), ("en", "fr")]
    assert [[r.key for r in c] for c in buckets[("en", "es")]] == [["h1", "h2"]]
    assert [[r.key for r in c] for c in buckets[("en", "fr")]] == [["h3"]]


def test_empty_input_yields_no_buckets() -> None:
    assert BatchGrouper(batch_size=5).group([]) == {}


def test_single_row() -> None:
    buckets = BatchGrouper(batch_size=5).group([pending_row("h1")])
    assert _flatten(buckets) == [pending_row("h1")]


@pytest.mark.parametrize("size", [0, 1, 7, 50])
@pytest.mark.parametrize("batch_size", [1, 3, 100])
def test_grouping_is_complete_and_disjoint(size: int, batch_size: int) -> None:
    """所有批次的并集恰好等于输入，不丢失也不重复。"""
    locales = ["fr", "es", "de"]
    rows = [pending_row(f"h{i}", locales[i % 3]) for i in range(size)]
    buckets = BatchGrouper(batch_size=batch_size).group(rows)

    flat = _flatten(buckets)
    assert len(flat) == len(rows)
    assert set(flat) == set(rows)
    assert all(0 < len(c) <= batch_size for chunks in buckets.values() for c in chunks)


def test_bucket_order_is_target_then_source() -> None:
    rows = [
        pending_row("a", "fr", source_locale="en"),
        pending_row("b", "es", source_locale="fr"),
        pending_row("c", "es", source_locale="de"),
    ]
    buckets = BatchGrouper(batch_size=10).group(rows)
    assert list(buckets) == [("de", "es"), ("fr", "es"), ("en", "fr")]


def test_insertion_order_is_preserved_within_bucket() -> None:
    rows = pending_rows([("z", "es"), ("a", "es"), ("m", "es")])
    buckets = BatchGrouper(batch_size=2).group(rows)
    assert [[r.key for r in c] for c in buckets[("en", "es")]] == [["z", "a"], ["m"]]


def test_ungrouped_mode_uses_single_bucket() -> None:
    rows = pending_rows([("h1", "es"), ("h2", "fr"), ("h3", "de")])
    buckets = BatchGrouper(batch_size=2, group_by_locale=False).group(rows)
    assert list(buckets) == [UNGROUPED]
    assert [[r.key for r in c] for c in buckets[UNGROUPED]] == [["h1", "h2"], ["h3"]]


def test_rows_without_key_are_skipped_and_counted() -> None:
    grouper = BatchGrouper(batch_size=2)
    buckets = grouper.group([pending_row(""), pending_row("h1")])
    assert grouper.skipped == 1
    assert [r.key for r in _flatten(buckets)] == ["h1"]


@pytest.mark.parametrize("bad", [0, -1])
def test_non_positive_batch_size_is_rejected(bad: int) -> None:
    with pytest.raises(ValueError):
        BatchGrouper(batch_size=bad)
    with pytest.raises(ValueError):
        chunked([1, 2], bad)


def test_chunked() -> None:
    assert chunked([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
    assert chunked([], 3) == []
