from __future__ import annotations

from pydantic import BaseModel, Field


class OutfitRecommendation(BaseModel):
    """Outfit built around the user's garment from inventory pieces."""

    title: str = Field(..., description="Short, catchy name for the outfit")
    justification: str = Field(..., description="Why the pieces work together for the occasion")
    accessories: list[str] = Field(default_factory=list, description="Suggested accessories")
    color_palette: list[str] = Field(default_factory=list, description="Colour names in the outfit")
    image_description: str = Field(
        ..., description="Vivid description of a person wearing the complete outfit, used for image generation"
    )


class ToteBagRecommendation(BaseModel):
    """Tote bag design upcycled from the user's old clothing."""

    title: str = Field(..., description="Name of the tote bag design")
    description: str = Field(..., description="How the clothing is transformed into the bag")
    material_type: str = Field(..., description="Material detected in the uploaded clothing")
    design_features: list[str] = Field(default_factory=list, description="Notable construction details")
    color_palette: list[str] = Field(default_factory=list, description="Colour names in the design")
    image_description: str = Field(
        ..., description="Vivid description of the finished tote bag showing the clothing's visual details"
    )
