"""Raster image model."""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RasterImage(BaseModel):
    """Pixel grid produced by a renderer.

    `pixels` holds `channels` interleaved bytes per pixel, row by row:
    1 for grayscale, 3 for RGB, 4 for RGBA.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    width_px: int = Field(gt=0)
    height_px: int = Field(gt=0)
    channels: int = Field(default=3, ge=1, le=4)
    pixels: bytes = Field(repr=False)

    @model_validator(mode="after")
    def _check_buffer(self) -> Self:
        if self.channels == 2:  # noqa: PLR2004
            raise ValueError("grayscale with alpha is not supported")
        expected = self.width_px * self.height_px * self.channels
        if len(self.pixels) != expected:
            raise ValueError(f"pixel buffer holds {len(self.pixels)} bytes, expected {expected}")
        return self

    @property
    def pixel_count(self) -> int:
        """Return number of pixels."""
        return self.width_px * self.height_px
