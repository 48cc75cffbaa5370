"""Document backends."""

from pdfreshape.backends.pymupdf_backend import PyMuPDFBackend
from pdfreshape.typing.protocol import DocumentBackend, Encoder, Loader, OutlineReader, Renderer, Writer

__all__ = [
    "DocumentBackend",
    "Encoder",
    "Loader",
    "OutlineReader",
    "PyMuPDFBackend",
    "Renderer",
    "Writer",
]
