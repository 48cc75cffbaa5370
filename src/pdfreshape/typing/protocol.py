"""Collaborator interfaces consumed by the transformation core."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pdfreshape.typing.enums import ImageFormat
    from pdfreshape.typing.models import Box, Document, ImageHandle, OutlineNode, Page, RasterImage


class Loader(Protocol):
    """Parses raw bytes into a document."""

    async def load(self, data: bytes) -> Document:
        """Load a document.

        Args:
            data: Raw document bytes.

        Returns:
            Document: Loaded document.
        """


class Renderer(Protocol):
    """Renders pages to raster images."""

    async def render(self, page: Page, scale: float, crop_rect: Box | None = None) -> RasterImage:
        """Render one page.

        Args:
            page: Page to render.
            scale: Pixels per point.
            crop_rect: Optional region of the page to render, in page coordinates.

        Returns:
            RasterImage: Rendered pixels.
        """


class Writer(Protocol):
    """Serializes documents to bytes."""

    async def serialize(self, document: Document, *, optimize_objects: bool = False) -> bytes:
        """Serialize a document.

        Args:
            document: Document to serialize.
            optimize_objects: Enable structural optimization such as shared-object deduplication.

        Returns:
            bytes: Serialized document.
        """


class Encoder(Protocol):
    """Encodes raster images and prepares them for embedding."""

    async def encode(self, image: RasterImage, image_format: ImageFormat, quality: float) -> bytes:
        """Encode a raster image.

        Args:
            image: Raster to encode.
            image_format: Target format.
            quality: Lossy quality factor in `(0, 1]`, ignored by lossless formats.

        Returns:
            bytes: Encoded image.
        """

    async def embed(self, document: Document, data: bytes, image_format: ImageFormat) -> ImageHandle:
        """Prepare encoded image bytes for drawing into `document`.

        Args:
            document: Document the image is destined for.
            data: Encoded image bytes.
            image_format: Format of `data`.

        Returns:
            ImageHandle: Handle usable as page content.
        """


class OutlineReader(Protocol):
    """Reads bookmark trees."""

    async def get_outline(self, document: Document) -> list[OutlineNode]:
        """Return the outline roots of a document, empty when it has none.

        Args:
            document: Loaded document.

        Returns:
            list[OutlineNode]: Top-level outline nodes.
        """


class DocumentBackend(Loader, Renderer, Writer, Encoder, OutlineReader, Protocol):
    """Backend implementing every collaborator."""
