"""Geometric page transforms: resize, crop, DPI rescale and N-up tiling."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pdfreshape.exceptions import InvalidRangeError
from pdfreshape.logging import get_operation_logger
from pdfreshape.progress import OperationTracker
from pdfreshape.typing.enums import CropMode, ImageFormat
from pdfreshape.typing.models import Box, Document, Layer, Page

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pdfreshape.progress import PageProgressCallback
    from pdfreshape.typing.models import CropMargins, NUpLayout, PageSize
    from pdfreshape.typing.protocol import Encoder, Renderer

CONTENT_MARGIN_FACTOR = 0.95
CROP_RENDER_SCALE = 2.0
BASELINE_DPI = 72.0
_FULL_PERCENT = 100.0


def resize_pages(
    document: Document,
    target_size: PageSize,
    *,
    scale_content: bool = True,
    on_progress: PageProgressCallback | None = None,
) -> Document:
    """Set every page to the target size.

    With `scale_content`, content is scaled uniformly about the page origin by
    `min(target_w / w, target_h / h) * 0.95`, leaving a 5% margin. Without it the
    canvas changes size and content keeps its coordinates, so it may be clipped
    or surrounded by blank space.

    Args:
        document (Document): Source document.
        target_size (PageSize): Target page size.
        scale_content (bool): Whether to scale content to the new size.
        on_progress (PageProgressCallback | None): Called with `(current, total)` after each page.

    Returns:
        Document: Resized document.
    """
    logger = get_operation_logger(
        "resize_pages",
        pages=document.page_count,
        width_pt=target_size.width_pt,
        height_pt=target_size.height_pt,
        scale_content=scale_content,
    )
    target_w, target_h = target_size.width_pt, target_size.height_pt
    resized: list[Page] = []

    with OperationTracker(logger, on_progress) as tracker:
        for page in document.pages:
            layers = None
            if scale_content:
                scale = min(target_w / page.width_pt, target_h / page.height_pt) * CONTENT_MARGIN_FACTOR
                layers = [layer.scaled(scale) for layer in page.layers]
            resized.append(page.reshaped(target_w, target_h, layers))
            tracker.advance(page.index + 1, document.page_count)

    logger.info("Pages resized")
    return Document.from_pages(resized)


def crop_pages(
    document: Document,
    margins: CropMargins,
    *,
    on_progress: PageProgressCallback | None = None,
) -> Document:
    """Remove margins from every page by changing page geometry only.

    Vector content is kept; only the visible window moves. Margins are resolved
    per page, and a page whose remaining width or height would be 0 or less is
    left unchanged.

    Args:
        document (Document): Source document.
        margins (CropMargins): Margins to remove, absolute or percentage.
        on_progress (PageProgressCallback | None): Called with `(current, total)` after each page.

    Returns:
        Document: Cropped document.
    """
    logger = get_operation_logger("crop_pages", pages=document.page_count, mode=margins.mode.to_str())
    cropped: list[Page] = []

    with OperationTracker(logger, on_progress) as tracker:
        for page in document.pages:
            inner = margins.inner_box(page.width_pt, page.height_pt)
            if inner is None:
                logger.debug("Crop leaves no area, page kept", extra={"page_index": page.index})
                cropped.append(page)
            else:
                window = Box.of_size(inner.width, inner.height)
                layers = [layer.placed(-inner.x0, -inner.y0, window) for layer in page.layers]
                cropped.append(
                    page.reshaped(inner.width, inner.height, [layer for layer in layers if layer is not None]),
                )
            tracker.advance(page.index + 1, document.page_count)

    logger.info("Pages cropped")
    return Document.from_pages(cropped)


def _check_percentage_margins(margins: CropMargins) -> None:
    if margins.left + margins.right >= _FULL_PERCENT or margins.top + margins.bottom >= _FULL_PERCENT:
        raise InvalidRangeError(message="percentage margins leave no page area")


async def crop_pages_by_percentage(
    document: Document,
    margins: CropMargins,
    *,
    renderer: Renderer,
    encoder: Encoder,
    on_progress: PageProgressCallback | None = None,
) -> Document:
    """Crop pages by percentage margins through rasterization.

    Each page is rendered at scale 2.0 restricted to the region left inside the
    margins (resolved against that page's own size). The raster is encoded as
    PNG and becomes the only content of a fresh page sized to the raster
    dimensions divided by the render scale. Vector content is flattened.

    Args:
        document (Document): Source document.
        margins (CropMargins): Percentage margins.
        renderer (Renderer): Page renderer.
        encoder (Encoder): Raster encoder.
        on_progress (PageProgressCallback | None): Called with `(current, total)` after each page.

    Raises:
        InvalidRangeError: If margins are not percentages or leave no area.

    Returns:
        Document: Rasterized, cropped document.
    """
    if margins.mode != CropMode.PERCENTAGE:
        raise InvalidRangeError(message="rasterizing crop requires percentage margins")
    _check_percentage_margins(margins)

    logger = get_operation_logger("crop_pages_by_percentage", pages=document.page_count)
    cropped: list[Page] = []

    with OperationTracker(logger, on_progress) as tracker:
        for page in document.pages:
            inner = margins.inner_box(page.width_pt, page.height_pt)
            if inner is None:
                raise InvalidRangeError(message=f"margins leave no area on page {page.index}")
            image = await renderer.render(page, CROP_RENDER_SCALE, inner)
            data = await encoder.encode(image, ImageFormat.PNG, 1.0)
            handle = await encoder.embed(document, data, ImageFormat.PNG)
            width_pt = image.width_px / CROP_RENDER_SCALE
            height_pt = image.height_px / CROP_RENDER_SCALE
            cropped.append(
                Page(
                    index=page.index,
                    width_pt=width_pt,
                    height_pt=height_pt,
                    layers=(Layer.for_image(handle, width_pt, height_pt),),
                ),
            )
            tracker.advance(page.index + 1, document.page_count)

    logger.info("Pages cropped by percentage")
    return Document.from_pages(cropped)


async def crop(
    document: Document,
    margins: CropMargins,
    *,
    renderer: Renderer,
    encoder: Encoder,
    on_progress: PageProgressCallback | None = None,
) -> Document:
    """Crop pages, dispatching on the margin mode.

    Args:
        document (Document): Source document.
        margins (CropMargins): Margins to remove.
        renderer (Renderer): Page renderer, used by percentage mode.
        encoder (Encoder): Raster encoder, used by percentage mode.
        on_progress (PageProgressCallback | None): Called with `(current, total)` after each page.

    Returns:
        Document: Cropped document.
    """
    if margins.mode == CropMode.PERCENTAGE:
        return await crop_pages_by_percentage(
            document,
            margins,
            renderer=renderer,
            encoder=encoder,
            on_progress=on_progress,
        )
    return crop_pages(document, margins, on_progress=on_progress)


def adjust_dpi(
    document: Document,
    target_dpi: float,
    *,
    baseline_dpi: float = BASELINE_DPI,
    on_progress: PageProgressCallback | None = None,
) -> Document:
    """Change the physical print size of pages.

    Page width and height are multiplied by `target_dpi / baseline_dpi`; content
    coordinates are not touched.

    Args:
        document (Document): Source document.
        target_dpi (float): Target resolution.
        baseline_dpi (float): Resolution the document is assumed to have.
        on_progress (PageProgressCallback | None): Called with `(current, total)` after each page.

    Raises:
        InvalidRangeError: If a resolution is not positive.

    Returns:
        Document: Rescaled document.
    """
    if target_dpi <= 0 or baseline_dpi <= 0:
        raise InvalidRangeError(message=f"DPI values must be > 0, got {target_dpi} / {baseline_dpi}")

    factor = target_dpi / baseline_dpi
    logger = get_operation_logger("adjust_dpi", pages=document.page_count, factor=factor)
    rescaled: list[Page] = []

    with OperationTracker(logger, on_progress) as tracker:
        for page in document.pages:
            rescaled.append(page.reshaped(page.width_pt * factor, page.height_pt * factor))
            tracker.advance(page.index + 1, document.page_count)

    logger.info("Page DPI adjusted")
    return Document.from_pages(rescaled)


def n_up(
    documents: Sequence[Document],
    layout: NUpLayout,
    *,
    on_progress: PageProgressCallback | None = None,
) -> Document:
    """Tile the pages of several documents onto shared sheets.

    Pages of all documents are taken in call order and placed row-major, unscaled
    and centered in their cell. The cell size of a sheet is the size of the first
    page placed on it; larger pages on the same sheet overflow their cell.

    Args:
        documents (Sequence[Document]): Input documents, concatenated in order.
        layout (NUpLayout): Pages per sheet and grid direction.
        on_progress (PageProgressCallback | None): Called with `(placed, total)` after each sheet.

    Returns:
        Document: Document with `ceil(total / pages_per_sheet)` sheets.
    """
    pages = [page for document in documents for page in document.pages]
    cols, rows = layout.grid
    total = len(pages)
    logger = get_operation_logger(
        "n_up",
        documents=len(documents),
        pages=total,
        cols=cols,
        rows=rows,
    )
    sheets: list[Page] = []
    position = 0

    with OperationTracker(logger, on_progress) as tracker:
        while position < total:
            cell_w, cell_h = pages[position].width_pt, pages[position].height_pt
            sheet_h = cell_h * rows
            layers: list[Layer] = []

            for slot in range(cols * rows):
                if position >= total:
                    break
                row, col = divmod(slot, cols)
                page = pages[position]
                x = col * cell_w + (cell_w - page.width_pt) / 2
                y = sheet_h - (row + 1) * cell_h + (cell_h - page.height_pt) / 2
                bounds = Box(x0=x, y0=y, x1=x + page.width_pt, y1=y + page.height_pt)
                for layer in page.layers:
                    placed = layer.placed(x, y, bounds)
                    if placed is not None:
                        layers.append(placed)
                position += 1

            sheets.append(
                Page(index=len(sheets), width_pt=cell_w * cols, height_pt=sheet_h, layers=tuple(layers)),
            )
            tracker.advance(position, total, sheet=len(sheets))

    logger.info("N-up sheets built", extra={"sheets": len(sheets)})
    return Document.from_pages(sheets)
