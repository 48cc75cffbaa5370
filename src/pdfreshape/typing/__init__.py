"""Typing-centric domain modules."""

from pdfreshape.typing.enums import (
    CompressionMode,
    CompressionPreset,
    CropMode,
    ImageFormat,
    LengthUnit,
    NUpDirection,
    OperationStatus,
    PaperSize,
)
from pdfreshape.typing.models import (
    Box,
    CompressionResult,
    CropMargins,
    Document,
    ImageHandle,
    Layer,
    NUpLayout,
    OutlineNode,
    Page,
    PageSize,
    RasterImage,
    SourceContent,
)
from pdfreshape.typing.protocol import DocumentBackend, Encoder, Loader, OutlineReader, Renderer, Writer

__all__ = [
    "Box",
    "CompressionMode",
    "CompressionPreset",
    "CompressionResult",
    "CropMargins",
    "CropMode",
    "Document",
    "DocumentBackend",
    "Encoder",
    "ImageFormat",
    "ImageHandle",
    "Layer",
    "LengthUnit",
    "Loader",
    "NUpDirection",
    "NUpLayout",
    "OperationStatus",
    "OutlineNode",
    "OutlineReader",
    "Page",
    "PageSize",
    "PaperSize",
    "RasterImage",
    "Renderer",
    "SourceContent",
    "Writer",
]
