"""Tote bag design and tote bag image endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from stylecraft.handlers.dependencies import get_generative_provider
from stylecraft.models import ImageRequest, ImageResponse, ToteBagDesignRequest, ToteBagRecommendation
from stylecraft.services.llm import GenerationError, GenerativeProvider, ImageNotProducedError
from stylecraft.services.sustainability import SustainabilityService

router = APIRouter(prefix="/api/sustainability")
logger = logging.getLogger(__name__)


@router.post("/design", response_model=ToteBagRecommendation)
async def design_tote_bag(
    body: ToteBagDesignRequest,
    provider: GenerativeProvider = Depends(get_generative_provider),
):
    try:
        return await SustainabilityService(provider).design(body.user_images, body.additional_material)
    except GenerationError as exc:
        logger.error("Tote bag design failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.post("/image", response_model=ImageResponse)
async def generate_tote_bag_image(
    body: ImageRequest,
    provider: GenerativeProvider = Depends(get_generative_provider),
):
    try:
        data_url = await SustainabilityService(provider).render(body.image_prompt, body.user_images or [])
    except ImageNotProducedError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except GenerationError as exc:
        logger.error("Tote bag image generation failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return ImageResponse(image_data_url=data_url)
