"""Tote bag designs upcycled from old clothing photos."""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from stylecraft.models import EncodedImage, ToteBagRecommendation
from stylecraft.services.llm import GenerativeProvider

logger = logging.getLogger(__name__)

PLAIN_MATERIAL = "plain"
MATERIAL_OPTIONS = {
    PLAIN_MATERIAL: "Plain (Uploaded Clothing Only)",
    "denim": "Denim",
    "khaki": "Khaki",
    "corduroy": "Corduroy",
}

SUSTAINABILITY_SYSTEM_INSTRUCTION = (
    "You are a sustainable fashion designer specializing in upcycling old clothing into functional and "
    "stylish tote bags. Analyze the uploaded clothing items carefully - examine their fabric type, "
    "texture, patterns, colors, and distinctive features. Create a tote bag design that DIRECTLY "
    "incorporates and transforms these specific visual elements from the uploaded clothing into the bag "
    "design. Detect the material type from what you see in the images. Your design should preserve "
    "recognizable elements from the original clothing (patterns, textures, seams, pockets, etc.) while "
    "creating a functional tote bag. If an additional material type is specified, incorporate that "
    "material into the design alongside the uploaded clothing to create variety and interesting "
    "combinations. Your text response must be strictly in the form of a JSON object that adheres to the "
    "provided schema. The `image_description` is critical - it must vividly describe a tote bag that "
    "visibly incorporates the specific visual characteristics, patterns, textures, and details from the "
    "uploaded clothing images."
)


def normalize_material(additional_material: Optional[str]) -> Optional[str]:
    """Map the UI's ``"plain"`` choice and blank input to no extra material."""

    if additional_material is None:
        return None
    material = additional_material.strip()
    if not material or material.lower() == PLAIN_MATERIAL:
        return None
    return material


def design_instruction(additional_material: Optional[str]) -> str:
    text = (
        "Analyze these uploaded old clothing items carefully. Detect the material type and fabric "
        "characteristics. Create a sustainable tote bag design that DIRECTLY incorporates the visual "
        "elements from these specific clothing items - their patterns, textures, colors, seams, pockets, "
        "and distinctive features."
    )
    material = normalize_material(additional_material)
    if material:
        return (
            f"{text} Additionally, incorporate {material} material into the design alongside the uploaded "
            "clothing to create a unique combination and design variety."
        )
    return (
        f"{text} Use ONLY the uploaded clothing material - create a plain, simple design that showcases "
        "the original clothing without additional materials."
    )


class SustainabilityService:
    def __init__(self, provider: GenerativeProvider) -> None:
        self._provider = provider

    async def design(
        self,
        clothing_images: Sequence[EncodedImage],
        additional_material: Optional[str] = None,
    ) -> ToteBagRecommendation:
        if not clothing_images:
            raise ValueError("Please upload at least one old clothing item.")
        logger.info("Tote bag design from %d photo(s), material=%s", len(clothing_images), additional_material)
        return await self._provider.generate_structured(
            design_instruction(additional_material),
            clothing_images,
            system_instruction=SUSTAINABILITY_SYSTEM_INSTRUCTION,
            response_model=ToteBagRecommendation,
        )

    async def render(self, image_description: str, clothing_images: Sequence[EncodedImage] = ()) -> str:
        return await self._provider.generate_image(image_description, clothing_images)
