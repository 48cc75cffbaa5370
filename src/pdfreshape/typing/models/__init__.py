"""Core domain model exports."""

from pdfreshape.typing.models.document import Document, ImageHandle, Layer, Page, SourceContent
from pdfreshape.typing.models.geometry import (
    PAPER_SIZES,
    Box,
    CropMargins,
    NUpLayout,
    PageSize,
    to_points,
)
from pdfreshape.typing.models.outline import OutlineNode
from pdfreshape.typing.models.raster import RasterImage
from pdfreshape.typing.models.results import CompressionResult

__all__ = [
    "PAPER_SIZES",
    "Box",
    "CompressionResult",
    "CropMargins",
    "Document",
    "ImageHandle",
    "Layer",
    "NUpLayout",
    "OutlineNode",
    "Page",
    "PageSize",
    "RasterImage",
    "SourceContent",
    "to_points",
]
