from __future__ import annotations

import asyncio

import pytest

from pdfreshape.compressor import PRESET_PARAMETERS, compress
from pdfreshape.exceptions import MissingCollaboratorError, PackageError
from pdfreshape.typing.enums import CompressionMode, CompressionPreset
from pdfreshape.typing.models import ImageHandle


def test_bitmap_compression_rasterizes_every_page(make_document, renderer, encoder, writer) -> None:
    progress: list[int] = []

    result = asyncio.run(
        compress(
            make_document(3, 100, 200),
            writer=writer,
            renderer=renderer,
            encoder=encoder,
            input_bytes=10_000,
            on_progress=progress.append,
        ),
    )

    assert progress == [30, 60, 90, 100]
    assert [call[1] for call in renderer.calls] == [2.0, 2.0, 2.0]
    assert encoder.encoded == [("jpeg", 0.8)] * 3
    assert writer.calls == [(3, True)]
    assert result.mode == CompressionMode.BITMAP
    assert result.page_count == 3
    assert result.output_bytes == 100 + 400 * 3
    assert result.saved_percent == 87


def test_bitmap_pages_keep_original_size(make_document, renderer, encoder, writer) -> None:
    asyncio.run(compress(make_document(2, 300, 150), writer=writer, renderer=renderer, encoder=encoder))

    output = writer.documents[-1]
    for page in output.pages:
        assert (page.width_pt, page.height_pt) == (300, 150)
        assert len(page.layers) == 1
        assert isinstance(page.layers[0].content, ImageHandle)
        assert page.layers[0].box.width == 300


def test_high_strength_preset_parameters(make_document, renderer, encoder, writer) -> None:
    asyncio.run(
        compress(
            make_document(1),
            writer=writer,
            renderer=renderer,
            encoder=encoder,
            preset=CompressionPreset.HIGH_STRENGTH,
        ),
    )

    assert PRESET_PARAMETERS[CompressionPreset.HIGH_STRENGTH] == (1.5, 0.6)
    assert renderer.calls[0][1] == 1.5
    assert encoder.encoded == [("jpeg", 0.6)]


def test_vector_compression_does_not_render(make_document, renderer, encoder, writer) -> None:
    progress: list[int] = []

    result = asyncio.run(
        compress(
            make_document(4),
            writer=writer,
            renderer=renderer,
            encoder=encoder,
            mode=CompressionMode.VECTOR,
            on_progress=progress.append,
        ),
    )

    assert progress == [10, 100]
    assert renderer.calls == []
    assert writer.calls == [(4, True)]
    assert result.saved_percent == 0


def test_bitmap_compression_requires_renderer_and_encoder(make_document, writer) -> None:
    with pytest.raises(MissingCollaboratorError, match="renderer") as exc_info:
        asyncio.run(compress(make_document(1), writer=writer))

    assert isinstance(exc_info.value, PackageError)
    assert writer.calls == []
