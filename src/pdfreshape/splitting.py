"""Size-bounded and outline-bounded document splitting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pdfreshape.exceptions import InvalidRangeError, NoOutlineError
from pdfreshape.logging import get_operation_logger
from pdfreshape.progress import OperationTracker

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pdfreshape.progress import PageProgressCallback
    from pdfreshape.typing.models import Document, OutlineNode
    from pdfreshape.typing.protocol import Writer


async def _serialized_size(
    document: Document,
    start: int,
    count: int,
    *,
    writer: Writer,
    optimize_objects: bool,
    cache: dict[tuple[int, int], int],
) -> int:
    """Return the byte size of pages `[start, start + count)` as a standalone document."""
    key = (start, count)
    if key not in cache:
        chunk = document.page_range(start, start + count)
        cache[key] = len(await writer.serialize(chunk, optimize_objects=optimize_objects))
    return cache[key]


async def _largest_fitting_chunk(
    document: Document,
    cursor: int,
    target_bytes: int,
    *,
    writer: Writer,
    optimize_objects: bool,
) -> int:
    """Binary-search the most consecutive pages from `cursor` that fit the budget.

    Returns at least 1 so a single oversized page still advances the cursor.
    """
    cache: dict[tuple[int, int], int] = {}
    left, right, best = 1, document.page_count - cursor, 1
    while left <= right:
        mid = (left + right) // 2
        size = await _serialized_size(
            document,
            cursor,
            mid,
            writer=writer,
            optimize_objects=optimize_objects,
            cache=cache,
        )
        if size <= target_bytes:
            best = mid
            left = mid + 1
        else:
            right = mid - 1
    return best


async def split_by_size(
    document: Document,
    target_bytes: int,
    *,
    writer: Writer,
    optimize_objects: bool = False,
    on_progress: PageProgressCallback | None = None,
) -> list[Document]:
    """Split a document into parts whose serialized size stays within a budget.

    Each part is the longest run of consecutive pages that serializes to at most
    `target_bytes`, found by binary search over real serializations. A page that
    alone exceeds the budget becomes its own, oversized part. The bound holds when
    parts are serialized with the same `optimize_objects` setting.

    Args:
        document (Document): Source document.
        target_bytes (int): Maximum serialized size per part.
        writer (Writer): Document serializer.
        optimize_objects (bool): Serialization option used for measuring.
        on_progress (PageProgressCallback | None): Called with `(cursor, total)` after each part.

    Raises:
        InvalidRangeError: If `target_bytes` is not positive.

    Returns:
        list[Document]: Parts in page order, covering every page exactly once.
    """
    if target_bytes <= 0:
        raise InvalidRangeError(message=f"target size must be > 0 bytes, got {target_bytes}")

    total = document.page_count
    logger = get_operation_logger("split_by_size", pages=total, target_bytes=target_bytes)
    parts: list[Document] = []
    cursor = 0

    with OperationTracker(logger, on_progress) as tracker:
        while cursor < total:
            count = await _largest_fitting_chunk(
                document,
                cursor,
                target_bytes,
                writer=writer,
                optimize_objects=optimize_objects,
            )
            parts.append(document.page_range(cursor, cursor + count))
            cursor += count
            tracker.advance(cursor, total, part=len(parts), part_pages=count)

    logger.info("Document split by size", extra={"parts": len(parts)})
    return parts


def outline_depth(outline: Sequence[OutlineNode]) -> int:
    """Return the number of outline levels (1 for a flat outline, 0 when empty)."""
    if not outline:
        return 0
    return 1 + max(outline_depth(node.children) for node in outline)


def flatten_outline(outline: Sequence[OutlineNode], target_level: int) -> list[OutlineNode]:
    """Collect the nodes at depth `target_level - 1`, in document (pre-order) order.

    Args:
        outline (Sequence[OutlineNode]): Outline roots.
        target_level (int): 1-based outline level; 1 selects top-level bookmarks.

    Returns:
        list[OutlineNode]: Nodes at the requested level.
    """
    selected: list[OutlineNode] = []

    def _walk(nodes: Sequence[OutlineNode], depth: int) -> None:
        for node in nodes:
            if depth == target_level - 1:
                selected.append(node)
            _walk(node.children, depth + 1)

    _walk(outline, 0)
    return selected


def _split_per_page(document: Document, tracker: OperationTracker) -> list[Document]:
    parts: list[Document] = []
    for index in range(document.page_count):
        parts.append(document.subset([index]))
        tracker.advance(index + 1, document.page_count)
    return parts


def split_by_outline(
    document: Document,
    outline: Sequence[OutlineNode],
    target_level: int = 1,
    *,
    on_progress: PageProgressCallback | None = None,
) -> list[Document]:
    """Split a document at the bookmarks of one outline level.

    Part `i` holds pages from bookmark `i` up to (excluding) bookmark `i + 1`; the
    last part runs to the end of the document. Bookmarks pointing past the last
    page and empty ranges produce no part. When the outline has no bookmark at the
    requested level, every page becomes its own part.

    Args:
        document (Document): Source document.
        outline (Sequence[OutlineNode]): Outline roots of `document`.
        target_level (int): 1-based outline level to split at.
        on_progress (PageProgressCallback | None): Called with `(current, total)` after each part.

    Raises:
        NoOutlineError: If the document has no bookmarks at all.
        InvalidRangeError: If `target_level` is below 1.

    Returns:
        list[Document]: Parts in document order.
    """
    if not outline:
        raise NoOutlineError
    if target_level < 1:
        raise InvalidRangeError(message=f"outline level must be >= 1, got {target_level}")

    total = document.page_count
    nodes = flatten_outline(outline, target_level)
    logger = get_operation_logger(
        "split_by_outline",
        pages=total,
        target_level=target_level,
        split_points=len(nodes),
    )
    parts: list[Document] = []

    with OperationTracker(logger, on_progress) as tracker:
        if not nodes:
            logger.info("No bookmarks at requested level, splitting per page")
            parts = _split_per_page(document, tracker)
        else:
            for position, node in enumerate(nodes):
                stop = nodes[position + 1].page_index if position + 1 < len(nodes) else total
                stop = min(stop, total)
                if node.page_index >= total or node.page_index >= stop:
                    logger.debug(
                        "Bookmark yields no pages",
                        extra={"title": node.title, "page_index": node.page_index},
                    )
                    continue
                parts.append(document.page_range(node.page_index, stop))
                tracker.advance(position + 1, len(nodes), title=node.title)

    logger.info("Document split by outline", extra={"parts": len(parts)})
    return parts
