"""Pytest marker auto-assignment by folder, plus fake document collaborators."""

from __future__ import annotations

from pathlib import Path

import pytest

from pdfreshape import logger
from pdfreshape.exceptions import RenderFailureError
from pdfreshape.typing.models import Document, ImageHandle, Layer, Page, RasterImage, SourceContent

SOURCE = object()


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = Path(config.rootpath) / "tests" / marker
    target_dir = target_dir.resolve()

    for item in items:
        try:
            path = Path(str(item.fspath)).resolve()
        except Exception:
            logger.warning(
                f"Could not resolve path for test item {item.name!s}; skipping {marker!s} marker assignment",
            )
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    _mark_tests_by_directory(config, items, "unit")
    _mark_tests_by_directory(config, items, "integration")
    _mark_tests_by_directory(config, items, "end2end")


def _page(index: int, width: float = 100.0, height: float = 200.0) -> Page:
    content = SourceContent(source=SOURCE, page_number=index, width_pt=width, height_pt=height)
    return Page(index=index, width_pt=width, height_pt=height, layers=(Layer.for_source(content),))


def _document(count: int, width: float = 100.0, height: float = 200.0) -> Document:
    return Document(pages=tuple(_page(idx, width, height) for idx in range(count)))


def _uniform(width: int, height: int, level: int = 255) -> RasterImage:
    return RasterImage(width_px=width, height_px=height, pixels=bytes([level]) * (width * height * 3))


def _striped(width: int, height: int) -> RasterImage:
    row = bytes([0, 0, 0, 255, 255, 255]) * (width // 2)
    return RasterImage(width_px=width, height_px=height, pixels=row * height)


class FakeRenderer:
    """Renderer returning a white raster for blank pages and black/white stripes otherwise."""

    def __init__(self) -> None:
        self.blank_pages: set[int] = set()
        self.failing_page: int | None = None
        self.calls: list[tuple[int, float, object]] = []

    async def render(self, page, scale, crop_rect=None):
        number = page.layers[0].content.page_number
        self.calls.append((number, scale, crop_rect))
        if number == self.failing_page:
            raise RenderFailureError(page_index=page.index)
        region = crop_rect or page.box
        width = max(2, round(region.width * scale))
        height = max(1, round(region.height * scale))
        width += width % 2
        if number in self.blank_pages:
            return _uniform(width, height)
        return _striped(width, height)


class FakeEncoder:
    """Encoder writing `<format>:<width>x<height>` instead of real image bytes."""

    def __init__(self) -> None:
        self.encoded: list[tuple[str, float]] = []

    async def encode(self, image, image_format, quality):
        self.encoded.append((image_format.to_str(), quality))
        return f"{image_format.to_str()}:{image.width_px}x{image.height_px}".encode()

    async def embed(self, document, data, image_format):
        width, height = data.decode().split(":")[1].split("x")
        return ImageHandle(image_format=image_format, data=data, width_px=int(width), height_px=int(height))


class FakeWriter:
    """Writer whose output size is `overhead + per_page * pages`."""

    def __init__(self) -> None:
        self.per_page = 400
        self.overhead = 100
        self.calls: list[tuple[int, bool]] = []
        self.documents: list[Document] = []

    async def serialize(self, document, *, optimize_objects=False):
        self.documents.append(document)
        self.calls.append((document.page_count, optimize_objects))
        return b"x" * (self.overhead + self.per_page * document.page_count)


@pytest.fixture
def make_page():
    return _page


@pytest.fixture
def make_document():
    return _document


@pytest.fixture
def uniform_image():
    return _uniform


@pytest.fixture
def striped_image():
    return _striped


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def encoder() -> FakeEncoder:
    return FakeEncoder()


@pytest.fixture
def writer() -> FakeWriter:
    return FakeWriter()
