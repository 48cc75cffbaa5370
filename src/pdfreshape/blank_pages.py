"""Blank-page detection and removal."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pdfreshape.exceptions import InvalidRangeError
from pdfreshape.logging import get_operation_logger
from pdfreshape.progress import OperationTracker
from pdfreshape.typing.models import Document

if TYPE_CHECKING:
    from pdfreshape.progress import PageProgressCallback
    from pdfreshape.typing.models import Page, RasterImage
    from pdfreshape.typing.protocol import Renderer

DEFAULT_VARIANCE_THRESHOLD = 0.01
CLASSIFY_SCALE = 1.0
_MAX_LEVEL = 255


def _channel_sums(image: RasterImage) -> list[int]:
    """Return `R + G + B` per pixel (three times the gray level for grayscale).

    Args:
        image (RasterImage): Rendered page.

    Returns:
        list[int]: Per-pixel channel sums.
    """
    pixels = memoryview(image.pixels)
    step = image.channels
    if step == 1:
        return [3 * value for value in pixels]
    return [
        red + green + blue
        for red, green, blue in zip(pixels[0::step], pixels[1::step], pixels[2::step], strict=True)
    ]


def luminance_variance(image: RasterImage) -> float:
    """Compute the population variance of `L = (R + G + B) / 3` over all pixels.

    Sums are kept as integers so a uniform image yields exactly 0.

    Args:
        image (RasterImage): Rendered page.

    Returns:
        float: Luminance variance in squared 0-255 levels.
    """
    sums = _channel_sums(image)
    count = len(sums)
    total = sum(sums)
    total_sq = sum(value * value for value in sums)
    return (count * total_sq - total * total) / (9 * count * count)


def _check_threshold(variance_threshold: float) -> None:
    if variance_threshold <= 0:
        raise InvalidRangeError(message=f"variance threshold must be > 0, got {variance_threshold}")


def classify_raster(image: RasterImage, variance_threshold: float) -> bool:
    """Return whether a rendered page is blank.

    Args:
        image (RasterImage): Page rendered at scale 1.0.
        variance_threshold (float): Sensitivity; lower is stricter.

    Returns:
        bool: True when `variance < variance_threshold * 255**2`.
    """
    return luminance_variance(image) < variance_threshold * _MAX_LEVEL * _MAX_LEVEL


async def is_blank(page: Page, variance_threshold: float, *, renderer: Renderer) -> bool:
    """Render a page and classify it as blank or not.

    Render failures propagate; a page that cannot be rendered is never
    reported as non-blank.

    Args:
        page (Page): Page to classify.
        variance_threshold (float): Sensitivity; lower is stricter.
        renderer (Renderer): Page renderer.

    Raises:
        InvalidRangeError: If the threshold is not positive.

    Returns:
        bool: True if the page is blank.
    """
    _check_threshold(variance_threshold)
    image = await renderer.render(page, CLASSIFY_SCALE)
    return classify_raster(image, variance_threshold)


async def remove_blank_pages(
    document: Document,
    *,
    renderer: Renderer,
    variance_threshold: float = DEFAULT_VARIANCE_THRESHOLD,
    on_progress: PageProgressCallback | None = None,
) -> Document:
    """Return a copy of the document without its blank pages.

    Args:
        document (Document): Source document.
        renderer (Renderer): Page renderer.
        variance_threshold (float): Sensitivity; lower is stricter.
        on_progress (PageProgressCallback | None): Called with `(current, total)` after each page.

    Returns:
        Document: Document holding the non-blank pages in original order.
    """
    _check_threshold(variance_threshold)
    logger = get_operation_logger("remove_blank_pages", pages=document.page_count)
    kept: list[Page] = []
    blank_indices: list[int] = []

    with OperationTracker(logger, on_progress) as tracker:
        for page in document.pages:
            if await is_blank(page, variance_threshold, renderer=renderer):
                blank_indices.append(page.index)
                logger.debug("Blank page detected", extra={"page_index": page.index})
            else:
                kept.append(page)
            tracker.advance(page.index + 1, document.page_count)

    logger.info("Blank pages removed", extra={"removed": len(blank_indices), "kept": len(kept)})
    return Document.from_pages(kept)
