from __future__ import annotations

import asyncio

import pytest

from pdfreshape.blank_pages import classify_raster, is_blank, luminance_variance, remove_blank_pages
from pdfreshape.exceptions import InvalidRangeError, RenderFailureError
from pdfreshape.typing.models import RasterImage


def test_uniform_image_has_zero_variance(uniform_image) -> None:
    image = uniform_image(8, 8, level=200)

    assert luminance_variance(image) == 0
    assert classify_raster(image, 0.001)


def test_variance_equal_to_threshold_is_not_blank() -> None:
    image = RasterImage(width_px=2, height_px=1, channels=1, pixels=bytes([0, 255]))

    assert luminance_variance(image) == pytest.approx(127.5**2)
    assert not classify_raster(image, 0.25)
    assert classify_raster(image, 0.2501)


def test_variance_uses_channel_mean() -> None:
    # (255, 0, 0) and (0, 0, 255) share luminance 85.
    image = RasterImage(width_px=2, height_px=1, pixels=bytes([255, 0, 0, 0, 0, 255]))

    assert luminance_variance(image) == 0


def test_alpha_channel_is_ignored() -> None:
    image = RasterImage(width_px=2, height_px=1, channels=4, pixels=bytes([10, 10, 10, 0, 10, 10, 10, 255]))

    assert luminance_variance(image) == 0


def test_is_blank_renders_at_unit_scale(make_page, renderer) -> None:
    renderer.blank_pages = {0}

    assert asyncio.run(is_blank(make_page(0), 0.01, renderer=renderer))
    assert renderer.calls == [(0, 1.0, None)]


def test_remove_blank_pages_keeps_order(make_document, renderer) -> None:
    renderer.blank_pages = {1, 3}
    progress: list[tuple[int, int]] = []

    result = asyncio.run(
        remove_blank_pages(
            make_document(5),
            renderer=renderer,
            on_progress=lambda current, total: progress.append((current, total)),
        ),
    )

    assert [page.layers[0].content.page_number for page in result.pages] == [0, 2, 4]
    assert [page.index for page in result.pages] == [0, 1, 2]
    assert progress == [(1, 5), (2, 5), (3, 5), (4, 5), (5, 5)]


def test_remove_blank_pages_can_remove_everything(make_document, renderer) -> None:
    renderer.blank_pages = {0, 1}

    assert asyncio.run(remove_blank_pages(make_document(2), renderer=renderer)).page_count == 0


def test_render_failure_propagates(make_document, renderer) -> None:
    renderer.failing_page = 1

    with pytest.raises(RenderFailureError, match="page index 1"):
        asyncio.run(remove_blank_pages(make_document(3), renderer=renderer))


def test_non_positive_threshold_is_rejected(make_document, renderer) -> None:
    with pytest.raises(InvalidRangeError):
        asyncio.run(remove_blank_pages(make_document(1), renderer=renderer, variance_threshold=0))
    assert renderer.calls == []
