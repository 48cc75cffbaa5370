"""Document collaborators implemented with PyMuPDF."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

try:
    import pymupdf as fitz
except Exception:  # pragma: no cover - optional dependency at runtime
    fitz: Any
    fitz = None

from pdfreshape.exceptions import (
    DependencyError,
    EncodingError,
    InvalidRangeError,
    MalformedDocumentError,
    RenderFailureError,
    SerializationError,
)
from pdfreshape.logging import get_logger
from pdfreshape.typing.enums import ImageFormat
from pdfreshape.typing.models import (
    Document,
    ImageHandle,
    Layer,
    OutlineNode,
    Page,
    RasterImage,
    SourceContent,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from pdfreshape.typing.models import Box

logger = get_logger(__name__)

_GRAY_CHANNELS = 1
_RGBA_CHANNELS = 4


def _to_fitz_rect(box: Box, page_height: float) -> fitz.Rect:
    """Convert a bottom-left-origin box to a PyMuPDF (top-left origin) rectangle.

    Args:
        box (Box): Box in PDF coordinates.
        page_height (float): Height of the page the box belongs to.

    Returns:
        fitz.Rect: Equivalent PyMuPDF rectangle.
    """
    return fitz.Rect(box.x0, page_height - box.y1, box.x1, page_height - box.y0)


def _jpeg_quality(quality: float) -> int:
    """Map a `(0, 1]` quality factor to PyMuPDF's 1-100 JPEG scale.

    Args:
        quality (float): Quality factor.

    Raises:
        InvalidRangeError: If quality is outside `(0, 1]`.

    Returns:
        int: JPEG quality.
    """
    if not 0 < quality <= 1:
        raise InvalidRangeError(message=f"image quality must be within (0, 1], got {quality}")
    return max(1, round(quality * 100))


def _toc_to_nodes(toc: Sequence[Sequence[Any]], position: int, level: int) -> tuple[list[OutlineNode], int]:
    """Rebuild outline nodes from a flat `get_toc(simple=True)` listing.

    Args:
        toc (Sequence[Sequence[Any]]): Entries `[level, title, page]`, level and page 1-based.
        position (int): First entry to read.
        level (int): 1-based level of the nodes to collect.

    Returns:
        tuple[list[OutlineNode], int]: Nodes at `level` and the next unread position.
    """
    nodes: list[OutlineNode] = []
    while position < len(toc) and int(toc[position][0]) >= level:
        _, title, page_number = toc[position][:3]
        children, position = _toc_to_nodes(toc, position + 1, level + 1)
        nodes.append(
            OutlineNode(
                title=str(title) if title else f"Untitled {level - 1}",
                page_index=max(0, int(page_number) - 1),
                level=level - 1,
                children=tuple(children),
            ),
        )
    return nodes, position


class PyMuPDFBackend:
    """Loader, renderer, writer, encoder and outline reader backed by PyMuPDF."""

    def __init__(self) -> None:
        """Initialize backend.

        Raises:
            DependencyError: If PyMuPDF is not installed.
        """
        if fitz is None:
            raise DependencyError(missing_package=["pymupdf"], message="document backend")

    async def load(self, data: bytes) -> Document:
        """Parse PDF bytes.

        Args:
            data (bytes): Raw PDF bytes.

        Raises:
            MalformedDocumentError: If the bytes are not a readable PDF.

        Returns:
            Document: Loaded document; every page is an untouched copy of its source page.
        """
        try:
            source = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise MalformedDocumentError(message=f"Failed to parse document: {exc}") from exc

        if source.needs_pass:
            source.close()
            raise MalformedDocumentError(message="Document is encrypted")

        try:
            pages: list[Page] = []
            for number, fitz_page in enumerate(source):
                rect = fitz_page.rect
                content = SourceContent(
                    source=source,
                    page_number=number,
                    width_pt=rect.width,
                    height_pt=rect.height,
                )
                pages.append(
                    Page(
                        index=number,
                        width_pt=rect.width,
                        height_pt=rect.height,
                        rotation_deg=fitz_page.rotation,
                        layers=(Layer.for_source(content),),
                    ),
                )
        except Exception as exc:
            source.close()
            raise MalformedDocumentError(message=f"Failed to read pages: {exc}") from exc

        logger.info("Document loaded", extra={"pages": len(pages), "input_bytes": len(data)})
        return Document(pages=tuple(pages), source=source)

    async def render(self, page: Page, scale: float, crop_rect: Box | None = None) -> RasterImage:
        """Render a page to RGB pixels.

        Args:
            page (Page): Page to render.
            scale (float): Pixels per point.
            crop_rect (Box | None): Optional region to render, in page coordinates.

        Raises:
            RenderFailureError: If rendering fails.

        Returns:
            RasterImage: Rendered pixels.
        """
        scratch = None
        try:
            content = page.source_copy
            if content is not None:
                fitz_page = content.source[content.page_number]
            else:
                scratch = self._build([page])
                fitz_page = scratch[0]
            clip = None if crop_rect is None else _to_fitz_rect(crop_rect, page.height_pt)
            pix = fitz_page.get_pixmap(matrix=fitz.Matrix(scale, scale), clip=clip, alpha=False)
            return RasterImage(
                width_px=pix.width,
                height_px=pix.height,
                channels=pix.n,
                pixels=bytes(pix.samples),
            )
        except Exception as exc:
            raise RenderFailureError(page_index=page.index) from exc
        finally:
            if scratch is not None:
                scratch.close()

    async def serialize(self, document: Document, *, optimize_objects: bool = False) -> bytes:
        """Write a document to PDF bytes.

        Args:
            document (Document): Document to write.
            optimize_objects (bool): Deduplicate shared objects, clean and compress content.

        Raises:
            SerializationError: If the document has no pages or cannot be written.

        Returns:
            bytes: PDF bytes.
        """
        if document.page_count == 0:
            raise SerializationError(message="Cannot write a document without pages")
        try:
            output = self._build(document.pages)
        except Exception as exc:
            raise SerializationError(message=f"Failed to assemble document: {exc}") from exc

        try:
            if optimize_objects:
                return output.tobytes(garbage=4, deflate=True, clean=True, use_objstms=1)
            return output.tobytes(garbage=1, deflate=True)
        except Exception as exc:
            raise SerializationError(message=f"Failed to write document: {exc}") from exc
        finally:
            output.close()

    async def encode(self, image: RasterImage, image_format: ImageFormat, quality: float) -> bytes:
        """Encode pixels as JPEG or PNG.

        Args:
            image (RasterImage): Raster to encode.
            image_format (ImageFormat): Target format.
            quality (float): JPEG quality factor in `(0, 1]`; ignored for PNG.

        Raises:
            EncodingError: If encoding fails.

        Returns:
            bytes: Encoded image.
        """
        jpeg_quality = _jpeg_quality(quality)
        colorspace = fitz.csGRAY if image.channels == _GRAY_CHANNELS else fitz.csRGB
        has_alpha = image.channels == _RGBA_CHANNELS
        try:
            pix = fitz.Pixmap(colorspace, image.width_px, image.height_px, image.pixels, has_alpha)
            if image_format == ImageFormat.JPEG:
                if has_alpha:
                    pix = fitz.Pixmap(pix, 0)
                return pix.tobytes(output="jpeg", jpg_quality=jpeg_quality)
            return pix.tobytes(output="png")
        except Exception as exc:
            raise EncodingError(message=f"Failed to encode {image_format.to_str()} image: {exc}") from exc

    async def embed(self, document: Document, data: bytes, image_format: ImageFormat) -> ImageHandle:
        """Validate encoded bytes and wrap them as page content.

        Args:
            document (Document): Document the image is destined for.
            data (bytes): Encoded image.
            image_format (ImageFormat): Format of `data`.

        Raises:
            EncodingError: If the bytes are not a readable image.

        Returns:
            ImageHandle: Image ready to be drawn.
        """
        try:
            pix = fitz.Pixmap(data)
            width_px, height_px = pix.width, pix.height
        except Exception as exc:
            raise EncodingError(message=f"Not a readable {image_format.to_str()} image: {exc}") from exc
        if width_px <= 0 or height_px <= 0:
            raise EncodingError(message=f"Not a readable {image_format.to_str()} image")
        logger.debug(
            "Image embedded",
            extra={"bytes": len(data), "width_px": width_px, "document_pages": document.page_count},
        )
        return ImageHandle(
            image_format=image_format,
            data=data,
            width_px=width_px,
            height_px=height_px,
        )

    async def get_outline(self, document: Document) -> list[OutlineNode]:
        """Read the bookmark tree of a loaded document.

        Bookmarks without a page destination resolve to the first page.

        Args:
            document (Document): Document returned by `load`.

        Returns:
            list[OutlineNode]: Outline roots, empty when the document has none.
        """
        if document.source is None:
            return []
        toc = document.source.get_toc(simple=True)
        nodes, _ = _toc_to_nodes(toc, 0, 1)
        return nodes

    @staticmethod
    def release(document: Document) -> None:
        """Close the PyMuPDF handle behind a loaded document."""
        if document.source is not None:
            document.source.close()

    @staticmethod
    def _drawable(content: SourceContent, upright: dict[tuple[int, int], Any]) -> tuple[Any, int] | None:
        """Resolve the document and page number to draw a source layer from.

        `show_pdf_page` ignores `/Rotate` when mapping the clip, so a rotated source
        page is first copied into a scratch document and its rotation baked into
        the content. The copy shows the same visual page with rotation 0.

        Args:
            content (SourceContent): Source layer content.
            upright (dict[tuple[int, int], Any]): Scratch documents already derotated.

        Returns:
            tuple[Any, int] | None: Document and page number, or None for a page without content.
        """
        source_page = content.source[content.page_number]
        if not source_page.get_contents():
            return None
        if not source_page.rotation:
            return content.source, content.page_number

        key = (id(content.source), content.page_number)
        if key not in upright:
            scratch = fitz.open()
            scratch.insert_pdf(content.source, from_page=content.page_number, to_page=content.page_number)
            scratch[0].remove_rotation()
            upright[key] = scratch
        return upright[key], 0

    @classmethod
    def _build(cls, pages: Iterable[Page]) -> fitz.Document:
        """Assemble pages into a new PyMuPDF document.

        Untouched source pages are copied as-is; runs of consecutive pages from the
        same source are copied together. Other pages are drawn layer by layer in
        visual coordinates and carry no rotation.

        Args:
            pages (Iterable[Page]): Pages in output order.

        Returns:
            fitz.Document: New in-memory document; the caller closes it.
        """
        output = fitz.open()
        run: list[Any] = []
        upright: dict[tuple[int, int], Any] = {}

        def _flush() -> None:
            if run:
                output.insert_pdf(run[0], from_page=run[1], to_page=run[2])
                run.clear()

        try:
            for page in pages:
                copy = page.source_copy
                if copy is not None:
                    if run and run[0] is copy.source and run[2] + 1 == copy.page_number:
                        run[2] = copy.page_number
                    else:
                        _flush()
                        run.extend([copy.source, copy.page_number, copy.page_number])
                    continue

                _flush()
                target = output.new_page(width=page.width_pt, height=page.height_pt)
                for layer in page.layers:
                    visible = layer.placed(0.0, 0.0, page.box)
                    if visible is None:
                        continue
                    rect = _to_fitz_rect(visible.box, page.height_pt)
                    content = visible.content
                    if isinstance(content, SourceContent):
                        drawable = cls._drawable(content, upright)
                        if drawable is None:
                            continue
                        clip = _to_fitz_rect(visible.clip or content.box, content.height_pt)
                        target.show_pdf_page(rect, drawable[0], drawable[1], clip=clip, keep_proportion=False)
                    else:
                        target.insert_image(rect, stream=content.data, keep_proportion=False)

            _flush()
        except Exception:
            output.close()
            raise
        finally:
            for scratch in upright.values():
                scratch.close()
        return output
