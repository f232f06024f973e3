"""Outfit styling: pair the user's garment with inventory pieces."""
from __future__ import annotations

import logging
from typing import Sequence

from stylecraft.models import EncodedImage, OutfitRecommendation
from stylecraft.services.llm import GenerativeProvider

logger = logging.getLogger(__name__)


STYLING_SYSTEM_INSTRUCTION = (
    "You are a world-class fashion stylist. Your task is to analyze a clothing item provided by the "
    "user (the first image) and a collection of inventory items (the subsequent images). Based on the "
    "user's context, create a complete, fashionable outfit by pairing the user's item with suitable "
    "items from the inventory. Your text response must be strictly in the form of a JSON object that "
    "adheres to the provided schema. The `image_description` should vividly describe a person wearing "
    "the complete, final outfit for image generation. Be creative and professional."
)


def styling_instruction(prompt: str) -> str:
    return (
        "Style the user's garment (first image) using items from the inventory "
        f'(subsequent images) for: "{prompt}"'
    )


class StylingService:
    def __init__(self, provider: GenerativeProvider) -> None:
        self._provider = provider

    async def recommend(
        self,
        prompt: str,
        user_image: EncodedImage,
        inventory_images: Sequence[EncodedImage],
    ) -> OutfitRecommendation:
        logger.info("Styling request with %d inventory image(s)", len(inventory_images))
        return await self._provider.generate_structured(
            styling_instruction(prompt),
            [user_image, *inventory_images],
            system_instruction=STYLING_SYSTEM_INSTRUCTION,
            response_model=OutfitRecommendation,
        )

    async def render(self, image_description: str) -> str:
        return await self._provider.generate_image(image_description)
