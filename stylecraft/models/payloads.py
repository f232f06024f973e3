from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .encoded_image import EncodedImage


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class OutfitRecommendationRequest(_CamelModel):
    prompt: str = Field(..., min_length=1)
    user_image: EncodedImage = Field(..., alias="userImage")
    inventory_images: list[EncodedImage] = Field(..., alias="inventoryImages")


class ImageRequest(_CamelModel):
    image_prompt: str = Field(..., alias="imagePrompt", min_length=1)
    user_images: Optional[list[EncodedImage]] = Field(default=None, alias="userImages")


class ToteBagDesignRequest(_CamelModel):
    user_images: list[EncodedImage] = Field(..., alias="userImages", min_length=1)
    additional_material: Optional[str] = Field(default=None, alias="additionalMaterial")


class ImageResponse(_CamelModel):
    image_data_url: str = Field(..., alias="imageDataUrl")
