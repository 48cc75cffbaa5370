"""Document recompression, either structural or by rasterizing every page."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pdfreshape.exceptions import MissingCollaboratorError
from pdfreshape.logging import get_operation_logger
from pdfreshape.progress import OperationTracker
from pdfreshape.typing.enums import CompressionMode, CompressionPreset, ImageFormat
from pdfreshape.typing.models import CompressionResult, Document, Layer, Page

if TYPE_CHECKING:
    from pdfreshape.progress import PageProgressCallback, PercentProgressCallback
    from pdfreshape.typing.protocol import Encoder, Renderer, Writer

# (render scale, JPEG quality) per preset.
PRESET_PARAMETERS: dict[CompressionPreset, tuple[float, float]] = {
    CompressionPreset.HIGH_STRENGTH: (1.5, 0.6),
    CompressionPreset.QUALITY_FIRST: (2.0, 0.8),
}
RENDER_PROGRESS_CAP = 90
_VECTOR_START_PERCENT = 10


def _percent_reporter(on_progress: PercentProgressCallback | None) -> PageProgressCallback | None:
    """Adapt a percentage callback to the tracker's `(current, total)` calls.

    The tracker is always fed `(percent, 100)`.
    """
    if on_progress is None:
        return None

    def _report(current: int, total: int) -> None:  # noqa: ARG001
        on_progress(current)

    return _report


async def _rasterize(
    document: Document,
    preset: CompressionPreset,
    *,
    renderer: Renderer,
    encoder: Encoder,
    tracker: OperationTracker,
) -> Document:
    """Rebuild the document from one JPEG per page.

    The render scale only controls visual fidelity; each output page keeps the
    size of its source page and the image is stretched to fill it exactly.

    Args:
        document (Document): Source document.
        preset (CompressionPreset): Quality preset.
        renderer (Renderer): Page renderer.
        encoder (Encoder): Raster encoder.
        tracker (OperationTracker): Progress tracker, fed percentages.

    Returns:
        Document: Rasterized document.
    """
    scale, quality = PRESET_PARAMETERS[preset]
    total = document.page_count
    pages: list[Page] = []
    for done, page in enumerate(document.pages, start=1):
        image = await renderer.render(page, scale)
        data = await encoder.encode(image, ImageFormat.JPEG, quality)
        handle = await encoder.embed(document, data, ImageFormat.JPEG)
        pages.append(
            Page(
                index=page.index,
                width_pt=page.width_pt,
                height_pt=page.height_pt,
                layers=(Layer.for_image(handle, page.width_pt, page.height_pt),),
            ),
        )
        tracker.advance(round(done / total * RENDER_PROGRESS_CAP), 100, page=done)
    return Document.from_pages(pages)


async def compress(
    document: Document,
    *,
    writer: Writer,
    renderer: Renderer | None = None,
    encoder: Encoder | None = None,
    mode: CompressionMode = CompressionMode.BITMAP,
    preset: CompressionPreset = CompressionPreset.QUALITY_FIRST,
    input_bytes: int = 0,
    on_progress: PercentProgressCallback | None = None,
) -> CompressionResult:
    """Recompress a document.

    Vector mode re-serializes the document with object deduplication and does not
    rasterize anything; already optimized inputs shrink little or not at all.
    Bitmap mode renders every page and rebuilds the document from JPEG images.
    Progress is reported after each page, capped at 90 until the final
    serialization, then 100.

    Args:
        document (Document): Source document.
        writer (Writer): Document serializer.
        renderer (Renderer | None): Page renderer, required in bitmap mode.
        encoder (Encoder | None): Raster encoder, required in bitmap mode.
        mode (CompressionMode): Compression strategy.
        preset (CompressionPreset): Bitmap quality preset.
        input_bytes (int): Size of the original file, used for the saving ratio.
        on_progress (PercentProgressCallback | None): Called with a percentage.

    Raises:
        MissingCollaboratorError: If bitmap mode is requested without renderer or encoder.

    Returns:
        CompressionResult: Serialized output and sizes.
    """
    logger = get_operation_logger(
        "compress",
        pages=document.page_count,
        mode=mode.to_str(),
        preset=preset.to_str(),
    )
    report = _percent_reporter(on_progress)

    with OperationTracker(logger, report) as tracker:
        if mode == CompressionMode.BITMAP:
            if renderer is None or encoder is None:
                raise MissingCollaboratorError(message="bitmap compression requires a renderer and an encoder")
            output = await _rasterize(document, preset, renderer=renderer, encoder=encoder, tracker=tracker)
        else:
            tracker.advance(_VECTOR_START_PERCENT, 100)
            output = document
        data = await writer.serialize(output, optimize_objects=True)
        tracker.advance(100, 100)

    result = CompressionResult(mode=mode, data=data, page_count=output.page_count, input_bytes=input_bytes)
    logger.info(
        "Document compressed",
        extra={
            "input_bytes": input_bytes,
            "output_bytes": result.output_bytes,
            "saved_percent": result.saved_percent,
        },
    )
    return result
