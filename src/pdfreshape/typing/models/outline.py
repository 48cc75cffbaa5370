"""Outline (bookmark) models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OutlineNode(BaseModel):
    """One bookmark of a document outline."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    title: str
    page_index: int = Field(default=0, ge=0)
    level: int = Field(default=0, ge=0)
    children: tuple[OutlineNode, ...] = ()
