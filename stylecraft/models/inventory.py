from __future__ import annotations

from pydantic import BaseModel, Field


class InventoryItem(BaseModel):
    id: int
    src: str = Field(..., min_length=1)  # image URL
    alt: str
