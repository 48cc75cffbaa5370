"""Document, page and page-content models.

Documents are immutable values. A page never points at another page: its
content is a tuple of layers, each drawing either a region of a page from a
loaded source file or an encoded raster image into a box of the page. Copying a
page into another document therefore creates an independent page, and the same
source page can be drawn into any number of output documents.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pdfreshape.typing.enums import ImageFormat
from pdfreshape.typing.models.geometry import Box

if TYPE_CHECKING:
    from collections.abc import Iterable

_ROTATIONS = frozenset({0, 90, 180, 270})
_EPSILON = 1e-6


class SourceContent(BaseModel):
    """One page of a loaded source file, referenced through a backend handle."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["source"] = "source"
    source: Any = Field(repr=False)
    page_number: int = Field(ge=0)
    width_pt: float = Field(gt=0)
    height_pt: float = Field(gt=0)

    @property
    def box(self) -> Box:
        """Return the full source page box."""
        return Box.of_size(self.width_pt, self.height_pt)


class ImageHandle(BaseModel):
    """Encoded raster image ready to be drawn on a page."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["image"] = "image"
    image_format: ImageFormat
    data: bytes = Field(repr=False)
    width_px: int = Field(gt=0)
    height_px: int = Field(gt=0)


class Layer(BaseModel):
    """Content drawn into `box` of a page.

    For source content, `clip` selects the shown region of the source page and is
    stretched onto `box`. Image content always fills `box`.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    content: Annotated[SourceContent | ImageHandle, Field(discriminator="kind")]
    box: Box
    clip: Box | None = None

    @classmethod
    def for_source(cls, content: SourceContent) -> Self:
        """Return the layer drawing a whole source page at its own coordinates."""
        return cls(content=content, box=content.box, clip=content.box)

    @classmethod
    def for_image(cls, image: ImageHandle, width_pt: float, height_pt: float) -> Self:
        """Return the layer stretching an image over a full page."""
        return cls(content=image, box=Box.of_size(width_pt, height_pt))

    def scaled(self, factor: float) -> Layer:
        """Return the layer scaled about the page origin."""
        return self.model_copy(update={"box": self.box.scaled(factor)})

    def placed(self, dx: float, dy: float, bounds: Box) -> Layer | None:
        """Move the layer and cut it to `bounds`.

        Args:
            dx (float): Horizontal offset.
            dy (float): Vertical offset.
            bounds (Box): Visible region, in the destination coordinates.

        Returns:
            Layer | None: Visible part of the layer, or None when nothing remains.
        """
        moved = self.box.translated(dx, dy)
        visible = moved.intersect(bounds)
        if visible is None:
            return None
        if self.clip is None or visible == moved:
            return self.model_copy(update={"box": moved})

        sx = self.clip.width / moved.width
        sy = self.clip.height / moved.height
        clip = Box(
            x0=self.clip.x0 + (visible.x0 - moved.x0) * sx,
            y0=self.clip.y0 + (visible.y0 - moved.y0) * sy,
            x1=self.clip.x0 + (visible.x1 - moved.x0) * sx,
            y1=self.clip.y0 + (visible.y1 - moved.y0) * sy,
        )
        return self.model_copy(update={"box": visible, "clip": clip})


class Page(BaseModel):
    """One page of a document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    index: int = Field(ge=0)
    width_pt: float = Field(gt=0)
    height_pt: float = Field(gt=0)
    rotation_deg: int = 0
    layers: tuple[Layer, ...] = ()

    @field_validator("rotation_deg")
    @classmethod
    def _check_rotation(cls, value: int) -> int:
        if value not in _ROTATIONS:
            raise ValueError("rotation must be one of 0, 90, 180, 270")
        return value

    @property
    def box(self) -> Box:
        """Return the page box."""
        return Box.of_size(self.width_pt, self.height_pt)

    @property
    def source_copy(self) -> SourceContent | None:
        """Return the source page when this page is an untouched copy of it."""
        if len(self.layers) != 1:
            return None
        layer = self.layers[0]
        if not isinstance(layer.content, SourceContent):
            return None
        full = layer.content.box
        if layer.box != full or layer.clip != full:
            return None
        if abs(self.width_pt - full.width) > _EPSILON or abs(self.height_pt - full.height) > _EPSILON:
            return None
        return layer.content

    def reshaped(self, width_pt: float, height_pt: float, layers: Iterable[Layer] | None = None) -> Page:
        """Return a copy with new geometry, dropping layer parts outside the new page.

        Args:
            width_pt (float): New width in points.
            height_pt (float): New height in points.
            layers (Iterable[Layer] | None): Replacement layers, defaults to the current ones.

        Returns:
            Page: Reshaped page.
        """
        bounds = Box.of_size(width_pt, height_pt)
        kept = [layer.placed(0.0, 0.0, bounds) for layer in (self.layers if layers is None else layers)]
        rotation = self.rotation_deg
        if width_pt != self.width_pt or height_pt != self.height_pt or layers is not None:
            rotation = 0
        return Page(
            index=self.index,
            width_pt=width_pt,
            height_pt=height_pt,
            rotation_deg=rotation,
            layers=tuple(layer for layer in kept if layer is not None),
        )


class Document(BaseModel):
    """Ordered sequence of pages."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    pages: tuple[Page, ...] = ()
    source: Any = Field(default=None, repr=False)

    @property
    def page_count(self) -> int:
        """Return number of pages."""
        return len(self.pages)

    @classmethod
    def from_pages(cls, pages: Iterable[Page]) -> Self:
        """Build a document from pages, renumbering them in order.

        Args:
            pages (Iterable[Page]): Pages, possibly taken from other documents.

        Returns:
            Document: New document owning independent page copies.
        """
        return cls(pages=tuple(page.model_copy(update={"index": idx}) for idx, page in enumerate(pages)))

    def subset(self, indices: Iterable[int]) -> Document:
        """Materialize a sub-document from page indices.

        Args:
            indices (Iterable[int]): 0-based page indices, in output order.

        Raises:
            IndexError: If an index is outside the document.

        Returns:
            Document: New document with the selected pages.
        """
        selected: list[Page] = []
        for idx in indices:
            if not 0 <= idx < len(self.pages):
                raise IndexError(f"page index {idx} out of range for {len(self.pages)} pages")
            selected.append(self.pages[idx])
        return Document.from_pages(selected)

    def page_range(self, start: int, stop: int) -> Document:
        """Materialize the consecutive pages `[start, stop)`."""
        return self.subset(range(start, stop))
