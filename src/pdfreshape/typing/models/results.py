"""Operation result models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pdfreshape.typing.enums import CompressionMode


class CompressionResult(BaseModel):
    """Serialized output of a compression run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: CompressionMode
    data: bytes = Field(repr=False)
    page_count: int = Field(ge=0)
    input_bytes: int = Field(ge=0)

    @property
    def output_bytes(self) -> int:
        """Return compressed size in bytes."""
        return len(self.data)

    @property
    def saved_percent(self) -> int:
        """Return saved share of the input size, never negative."""
        if self.input_bytes <= 0:
            return 0
        return max(0, round((self.input_bytes - self.output_bytes) / self.input_bytes * 100))
