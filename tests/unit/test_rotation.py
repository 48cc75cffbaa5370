from __future__ import annotations

import asyncio

import pytest

from pdfreshape.compressor import compress
from pdfreshape.geometry import crop_pages, n_up, resize_pages
from pdfreshape.typing.enums import LengthUnit
from pdfreshape.typing.models import CropMargins, Document, ImageHandle, NUpLayout, PageSize

ROTATIONS = [90, 270]


def _coords(box) -> tuple[float, float, float, float]:
    return (box.x0, box.y0, box.x1, box.y1)


@pytest.fixture
def rotated_document(make_page):
    """Two landscape pages whose visual size is 300x200 after rotation."""

    def _build(rotation: int, count: int = 2) -> Document:
        return Document.from_pages(
            make_page(index, 300, 200).model_copy(update={"rotation_deg": rotation}) for index in range(count)
        )

    return _build


@pytest.mark.parametrize("rotation", ROTATIONS)
def test_crop_works_in_visual_coordinates(rotated_document, rotation: int) -> None:
    cropped = crop_pages(rotated_document(rotation), CropMargins(top=1, right=1, bottom=1, left=1, unit=LengthUnit.PT))

    for page in cropped.pages:
        assert (page.width_pt, page.height_pt, page.rotation_deg) == (298, 198, 0)
        assert _coords(page.layers[0].box) == (0, 0, 298, 198)
        assert _coords(page.layers[0].clip) == (1, 1, 299, 199)


@pytest.mark.parametrize("rotation", ROTATIONS)
def test_n_up_cells_use_visual_size(rotated_document, rotation: int) -> None:
    sheets = n_up([rotated_document(rotation)], NUpLayout(pages_per_sheet=2))

    sheet = sheets.pages[0]
    assert (sheet.width_pt, sheet.height_pt, sheet.rotation_deg) == (600, 200, 0)
    assert [_coords(layer.box) for layer in sheet.layers] == [(0, 0, 300, 200), (300, 0, 600, 200)]
    assert all(_coords(layer.clip) == (0, 0, 300, 200) for layer in sheet.layers)


@pytest.mark.parametrize("rotation", ROTATIONS)
def test_resize_with_scaling_drops_rotation(rotated_document, rotation: int) -> None:
    resized = resize_pages(rotated_document(rotation), PageSize(width_pt=300, height_pt=200))

    page = resized.pages[0]
    assert page.rotation_deg == 0
    assert page.source_copy is None
    assert _coords(page.layers[0].box) == pytest.approx((0, 0, 285, 190))


@pytest.mark.parametrize("rotation", ROTATIONS)
def test_resize_to_same_size_without_scaling_keeps_rotation(rotated_document, rotation: int) -> None:
    resized = resize_pages(rotated_document(rotation), PageSize(width_pt=300, height_pt=200), scale_content=False)

    assert all(page.rotation_deg == rotation for page in resized.pages)
    assert all(page.source_copy is not None for page in resized.pages)


@pytest.mark.parametrize("rotation", ROTATIONS)
def test_bitmap_compression_keeps_visual_size(rotated_document, renderer, encoder, writer, rotation: int) -> None:
    asyncio.run(compress(rotated_document(rotation), writer=writer, renderer=renderer, encoder=encoder))

    output = writer.documents[-1]
    for page in output.pages:
        assert (page.width_pt, page.height_pt, page.rotation_deg) == (300, 200, 0)
        image = page.layers[0].content
        assert isinstance(image, ImageHandle)
        assert (image.width_px, image.height_px) == (600, 400)
        assert _coords(page.layers[0].box) == (0, 0, 300, 200)
