from __future__ import annotations

import pytest

from pdfreshape.typing.enums import CompressionPreset, PaperSize


def test_from_str_and_to_str() -> None:
    assert PaperSize.from_str("a4") is PaperSize.A4
    assert CompressionPreset.from_str("high-strength").to_str() == "high-strength"


def test_from_str_lists_supported_values() -> None:
    with pytest.raises(ValueError, match="Expected one of: a4, a3"):
        PaperSize.from_str("b5")
