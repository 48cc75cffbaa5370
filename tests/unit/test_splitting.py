from __future__ import annotations

import asyncio

import pytest

from pdfreshape.exceptions import InvalidRangeError, NoOutlineError
from pdfreshape.splitting import flatten_outline, outline_depth, split_by_outline, split_by_size
from pdfreshape.typing.models import OutlineNode


def _page_numbers(document) -> list[int]:
    return [page.layers[0].content.page_number for page in document.pages]


def test_split_by_size_packs_largest_fitting_runs(make_document, writer) -> None:
    progress: list[tuple[int, int]] = []

    parts = asyncio.run(
        split_by_size(make_document(10), 1000, writer=writer, on_progress=lambda c, t: progress.append((c, t))),
    )

    assert [part.page_count for part in parts] == [2, 2, 2, 2, 2]
    assert [number for part in parts for number in _page_numbers(part)] == list(range(10))
    assert progress == [(2, 10), (4, 10), (6, 10), (8, 10), (10, 10)]


@pytest.mark.parametrize("target", [500, 900, 1300, 2500, 10_000])
def test_split_by_size_respects_budget(make_document, writer, target: int) -> None:
    parts = asyncio.run(split_by_size(make_document(7), target, writer=writer))

    assert sum(part.page_count for part in parts) == 7
    for part in parts:
        size = writer.overhead + writer.per_page * part.page_count
        assert size <= target or part.page_count == 1


def test_split_by_size_emits_oversized_single_pages(make_document, writer) -> None:
    parts = asyncio.run(split_by_size(make_document(3), 50, writer=writer))

    assert [part.page_count for part in parts] == [1, 1, 1]


def test_split_by_size_forwards_serialization_options(make_document, writer) -> None:
    asyncio.run(split_by_size(make_document(2), 10_000, writer=writer, optimize_objects=True))

    assert writer.calls
    assert all(optimize for _, optimize in writer.calls)


def test_split_by_size_rejects_non_positive_target(make_document, writer) -> None:
    with pytest.raises(InvalidRangeError):
        asyncio.run(split_by_size(make_document(2), 0, writer=writer))


def _outline() -> list[OutlineNode]:
    return [
        OutlineNode(
            title="Part 1",
            page_index=0,
            children=(
                OutlineNode(title="1.1", page_index=1, level=1),
                OutlineNode(title="1.2", page_index=2, level=1),
            ),
        ),
        OutlineNode(title="Part 2", page_index=3, children=(OutlineNode(title="2.1", page_index=5, level=1),)),
        OutlineNode(title="Part 3", page_index=7),
    ]


def test_flatten_outline_is_pre_order() -> None:
    assert [node.title for node in flatten_outline(_outline(), 1)] == ["Part 1", "Part 2", "Part 3"]
    assert [node.title for node in flatten_outline(_outline(), 2)] == ["1.1", "1.2", "2.1"]
    assert flatten_outline(_outline(), 3) == []


def test_outline_depth() -> None:
    assert outline_depth([]) == 0
    assert outline_depth([OutlineNode(title="only")]) == 1
    assert outline_depth(_outline()) == 2


def test_split_by_outline_top_level(make_document) -> None:
    parts = split_by_outline(make_document(10), _outline())

    assert [_page_numbers(part) for part in parts] == [[0, 1, 2], [3, 4, 5, 6], [7, 8, 9]]


def test_split_by_outline_second_level_skips_leading_pages(make_document) -> None:
    progress: list[tuple[int, int]] = []

    parts = split_by_outline(make_document(10), _outline(), 2, on_progress=lambda c, t: progress.append((c, t)))

    assert [_page_numbers(part) for part in parts] == [[1], [2, 3, 4], [5, 6, 7, 8, 9]]
    assert progress == [(1, 3), (2, 3), (3, 3)]


def test_split_by_outline_falls_back_to_single_pages(make_document) -> None:
    parts = split_by_outline(make_document(3), _outline(), 3)

    assert [_page_numbers(part) for part in parts] == [[0], [1], [2]]


def test_split_by_outline_skips_bookmarks_past_the_end(make_document) -> None:
    outline = [OutlineNode(title="A", page_index=0), OutlineNode(title="B", page_index=12)]

    parts = split_by_outline(make_document(4), outline)

    assert [part.page_count for part in parts] == [4]


def test_split_by_outline_skips_empty_ranges(make_document) -> None:
    outline = [OutlineNode(title="A", page_index=2), OutlineNode(title="B", page_index=2)]

    parts = split_by_outline(make_document(4), outline)

    assert [_page_numbers(part) for part in parts] == [[2, 3]]


def test_split_by_outline_requires_bookmarks(make_document) -> None:
    with pytest.raises(NoOutlineError, match="does not contain bookmarks"):
        split_by_outline(make_document(2), [])


def test_split_by_outline_rejects_level_zero(make_document) -> None:
    with pytest.raises(InvalidRangeError):
        split_by_outline(make_document(2), _outline(), 0)
