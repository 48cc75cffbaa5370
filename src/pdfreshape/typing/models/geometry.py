"""Page geometry models."""

from __future__ import annotations

from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pdfreshape.typing.enums import CropMode, LengthUnit, NUpDirection, PaperSize

POINTS_PER_INCH = 72.0
MM_PER_INCH = 25.4

# Standard paper sizes in points (1 point = 1/72 inch).
PAPER_SIZES: dict[PaperSize, tuple[float, float]] = {
    PaperSize.A4: (595.28, 841.89),
    PaperSize.A3: (841.89, 1190.55),
    PaperSize.A5: (420.94, 595.28),
    PaperSize.LETTER: (612.0, 792.0),
    PaperSize.LEGAL: (612.0, 1008.0),
    PaperSize.TABLOID: (792.0, 1224.0),
}

_NUP_GRIDS: dict[int, dict[NUpDirection, tuple[int, int]]] = {
    2: {NUpDirection.HORIZONTAL: (2, 1), NUpDirection.VERTICAL: (1, 2)},
    4: {NUpDirection.HORIZONTAL: (2, 2), NUpDirection.VERTICAL: (2, 2)},
    6: {NUpDirection.HORIZONTAL: (3, 2), NUpDirection.VERTICAL: (2, 3)},
    8: {NUpDirection.HORIZONTAL: (4, 2), NUpDirection.VERTICAL: (2, 4)},
    9: {NUpDirection.HORIZONTAL: (3, 3), NUpDirection.VERTICAL: (3, 3)},
    16: {NUpDirection.HORIZONTAL: (4, 4), NUpDirection.VERTICAL: (4, 4)},
}


def to_points(value: float, unit: LengthUnit) -> float:
    """Convert a length to points.

    Args:
        value (float): Length expressed in `unit`.
        unit (LengthUnit): Source unit.

    Returns:
        float: Length in points.
    """
    if unit == LengthUnit.INCH:
        return value * POINTS_PER_INCH
    if unit == LengthUnit.MM:
        return value * POINTS_PER_INCH / MM_PER_INCH
    return value


class Box(BaseModel):
    """Axis-aligned rectangle in PDF coordinates (origin bottom-left, y up)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        """Return box width."""
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        """Return box height."""
        return self.y1 - self.y0

    @property
    def is_empty(self) -> bool:
        """Return whether the box has no area."""
        return self.width <= 0 or self.height <= 0

    @classmethod
    def of_size(cls, width: float, height: float) -> Self:
        """Return the box spanning `(0, 0)` to `(width, height)`."""
        return cls(x0=0.0, y0=0.0, x1=width, y1=height)

    def translated(self, dx: float, dy: float) -> Box:
        """Return the box moved by `(dx, dy)`."""
        return Box(x0=self.x0 + dx, y0=self.y0 + dy, x1=self.x1 + dx, y1=self.y1 + dy)

    def scaled(self, factor: float) -> Box:
        """Return the box scaled about the origin."""
        return Box(x0=self.x0 * factor, y0=self.y0 * factor, x1=self.x1 * factor, y1=self.y1 * factor)

    def intersect(self, other: Box) -> Box | None:
        """Return the overlap with another box, or None when they do not overlap."""
        overlap = Box(
            x0=max(self.x0, other.x0),
            y0=max(self.y0, other.y0),
            x1=min(self.x1, other.x1),
            y1=min(self.y1, other.y1),
        )
        return None if overlap.is_empty else overlap


class PageSize(BaseModel):
    """Target page size in points."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    width_pt: float = Field(gt=0)
    height_pt: float = Field(gt=0)

    @classmethod
    def from_preset(cls, preset: PaperSize) -> Self:
        """Build a page size from a named paper preset.

        Args:
            preset (PaperSize): Paper preset.

        Returns:
            PageSize: Preset dimensions in points.
        """
        width, height = PAPER_SIZES[preset]
        return cls(width_pt=width, height_pt=height)

    @classmethod
    def from_dimensions(cls, width: float, height: float, unit: LengthUnit) -> Self:
        """Build a page size from custom dimensions.

        Args:
            width (float): Width in `unit`.
            height (float): Height in `unit`.
            unit (LengthUnit): Unit of both dimensions.

        Returns:
            PageSize: Dimensions in points.
        """
        return cls(width_pt=to_points(width, unit), height_pt=to_points(height, unit))


class CropMargins(BaseModel):
    """Margins removed from every page edge."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    top: float = Field(default=0.0, ge=0)
    right: float = Field(default=0.0, ge=0)
    bottom: float = Field(default=0.0, ge=0)
    left: float = Field(default=0.0, ge=0)
    mode: CropMode = CropMode.ABSOLUTE
    unit: LengthUnit = LengthUnit.MM

    @model_validator(mode="after")
    def _check_percentages(self) -> Self:
        if self.mode == CropMode.PERCENTAGE:
            for value in (self.top, self.right, self.bottom, self.left):
                if value > 100:  # noqa: PLR2004
                    raise ValueError("percentage margins must be within 0-100")
        return self

    def inner_box(self, width_pt: float, height_pt: float) -> Box | None:
        """Resolve margins against one page and return the kept region.

        Percentage margins are resolved against this page's own width and height.

        Args:
            width_pt (float): Page width in points.
            height_pt (float): Page height in points.

        Returns:
            Box | None: Kept region in page coordinates, or None when nothing remains.
        """
        if self.mode == CropMode.PERCENTAGE:
            top = self.top / 100 * height_pt
            bottom = self.bottom / 100 * height_pt
            left = self.left / 100 * width_pt
            right = self.right / 100 * width_pt
        else:
            top = to_points(self.top, self.unit)
            bottom = to_points(self.bottom, self.unit)
            left = to_points(self.left, self.unit)
            right = to_points(self.right, self.unit)

        box = Box(x0=left, y0=bottom, x1=width_pt - right, y1=height_pt - top)
        return None if box.is_empty else box


class NUpLayout(BaseModel):
    """Grid used to tile several pages on one sheet."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    pages_per_sheet: Literal[2, 4, 6, 8, 9, 16]
    direction: NUpDirection = NUpDirection.HORIZONTAL

    @property
    def grid(self) -> tuple[int, int]:
        """Return `(cols, rows)` for this layout."""
        return _NUP_GRIDS[self.pages_per_sheet][self.direction]
