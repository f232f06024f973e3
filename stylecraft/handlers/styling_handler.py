"""Outfit recommendation and outfit image endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from stylecraft.handlers.dependencies import get_generative_provider
from stylecraft.models import ImageRequest, ImageResponse, OutfitRecommendation, OutfitRecommendationRequest
from stylecraft.services.llm import GenerationError, GenerativeProvider, ImageNotProducedError
from stylecraft.services.styling import StylingService

router = APIRouter(prefix="/api/styling")
logger = logging.getLogger(__name__)


@router.post("/recommend", response_model=OutfitRecommendation)
async def recommend_outfit(
    body: OutfitRecommendationRequest,
    provider: GenerativeProvider = Depends(get_generative_provider),
):
    try:
        return await StylingService(provider).recommend(body.prompt, body.user_image, body.inventory_images)
    except GenerationError as exc:
        logger.error("Outfit recommendation failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.post("/image", response_model=ImageResponse)
async def generate_outfit_image(
    body: ImageRequest,
    provider: GenerativeProvider = Depends(get_generative_provider),
):
    try:
        data_url = await StylingService(provider).render(body.image_prompt)
    except ImageNotProducedError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except GenerationError as exc:
        logger.error("Outfit image generation failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return ImageResponse(image_data_url=data_url)
