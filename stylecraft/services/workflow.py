"""End-to-end user flows: outfit styling and tote bag design.

Each flow reports human-readable progress messages through an optional
callback and always clears it (``None``) when it finishes, whether it
succeeded or not.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import httpx

from stylecraft.models import EncodedImage, InventoryItem, OutfitRecommendation, ToteBagRecommendation
from stylecraft.services.api_client import StylecraftClient
from stylecraft.services.image_fetch import BatchResult, FetchOptions, SleepFn, fetch_and_encode

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Optional[str]], None]


@dataclass(frozen=True)
class OutfitResult:
    recommendation: OutfitRecommendation
    image_data_url: str
    inventory: List[InventoryItem]
    batch: BatchResult


@dataclass(frozen=True)
class ToteBagResult:
    recommendation: ToteBagRecommendation
    image_data_url: str


def _noop(_message: Optional[str]) -> None:
    return None


class OutfitWorkflow:
    """Garment photo + style context -> outfit recommendation and rendered look."""

    def __init__(
        self,
        client: StylecraftClient,
        *,
        fetch_options: Optional[FetchOptions] = None,
        image_client: Optional[httpx.AsyncClient] = None,
        sleep: SleepFn = asyncio.sleep,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        self._client = client
        self._fetch_options = fetch_options or FetchOptions()
        self._image_client = image_client
        self._sleep = sleep
        self._progress = progress or _noop

    async def run(self, prompt: str, garment: Optional[EncodedImage]) -> OutfitResult:
        if garment is None or not prompt.strip():
            raise ValueError("Please upload a garment and provide a style context.")

        try:
            self._progress("Fetching inventory items...")
            inventory = await self._client.get_inventory()
            if not inventory:
                raise ValueError("Inventory is not loaded. Please wait and try again.")

            def report_batch(number: int, total: int) -> None:
                self._progress(f"Fetching inventory items... ({number}/{total})")

            batch = await fetch_and_encode(
                [item.src for item in inventory],
                self._fetch_options,
                client=self._image_client,
                sleep=self._sleep,
                progress=report_batch,
            )
            if batch.failures:
                logger.info("%d inventory image(s) skipped", len(batch.failures))

            self._progress("Analyzing garment & styling...")
            recommendation = await self._client.get_outfit_recommendation(prompt, garment, batch.images)

            self._progress("Generating the final look...")
            image_data_url = await self._client.generate_outfit_image(recommendation.image_description)
        finally:
            self._progress(None)

        return OutfitResult(recommendation, image_data_url, inventory, batch)


class ToteBagWorkflow:
    """Old clothing photos -> upcycled tote bag design and rendering."""

    def __init__(self, client: StylecraftClient, *, progress: Optional[ProgressCallback] = None) -> None:
        self._client = client
        self._progress = progress or _noop

    async def run(
        self,
        clothing: Sequence[EncodedImage],
        additional_material: Optional[str] = None,
    ) -> ToteBagResult:
        if not clothing:
            raise ValueError("Please upload at least one old clothing item.")

        try:
            self._progress("Analyzing clothing material and designing your tote bag...")
            recommendation = await self._client.get_tote_bag_design(clothing, additional_material)

            self._progress("Generating the tote bag design...")
            image_data_url = await self._client.generate_tote_bag_image(recommendation.image_description, clothing)
        finally:
            self._progress(None)

        return ToteBagResult(recommendation, image_data_url)
