"""Async client for the Stylecraft HTTP API.

This is the caller side of the two flows: it lists the inventory, posts
recommendation/design requests and asks for rendered images.  Transport
failures surface as :class:`ServiceUnreachableError`, non-success statuses
as :class:`StylecraftAPIError`.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from stylecraft.config import Settings
from stylecraft.models import EncodedImage, InventoryItem, OutfitRecommendation, ToteBagRecommendation
from stylecraft.services.inventory import items_from_payload

logger = logging.getLogger(__name__)

_BYTES_PER_MB = 1024 * 1024

ModelT = TypeVar("ModelT", bound=BaseModel)


class StylecraftAPIError(Exception):
    """Raised when the API answers with an error status."""

    def __init__(self, status: int, message: str, response_json: Optional[Any] = None):
        super().__init__(message)
        self.status = status
        self.response_json = response_json


class ServiceUnreachableError(Exception):
    """Raised when the API cannot be reached at all."""


class RequestTooLargeError(ValueError):
    """Raised before sending a request whose body exceeds the size ceiling."""

    def __init__(self, size_mb: float, limit_mb: float):
        super().__init__(
            f"Request body is too large ({size_mb:.2f}MB). Please reduce the number of inventory images."
        )
        self.size_mb = size_mb
        self.limit_mb = limit_mb


class StylecraftClient:
    """Minimal async client for the Stylecraft API."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 120.0,
        max_request_mb: float = 50.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._max_request_mb = max_request_mb
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "StylecraftClient":
        return cls(
            base_url=settings.api_base_url,
            timeout=settings.api_timeout_s,
            max_request_mb=settings.max_request_mb,
            **kwargs,
        )

    async def __aenter__(self) -> "StylecraftClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_inventory(self) -> List[InventoryItem]:
        data = await self._request("GET", "/api/inventory", fallback="Failed to load inventory")
        try:
            return items_from_payload(data)
        except ValueError as exc:
            raise StylecraftAPIError(200, f"Malformed inventory response: {exc}", data) from exc

    async def get_outfit_recommendation(
        self,
        prompt: str,
        user_image: EncodedImage,
        inventory_images: Sequence[EncodedImage],
    ) -> OutfitRecommendation:
        payload = {
            "prompt": prompt,
            "userImage": user_image.model_dump(by_alias=True),
            "inventoryImages": [img.model_dump(by_alias=True) for img in inventory_images],
        }
        body = self.encode_body(payload)
        data = await self._request(
            "POST",
            "/api/styling/recommend",
            content=body,
            fallback="Failed to get outfit recommendation",
        )
        return _parse(OutfitRecommendation, data)

    async def generate_outfit_image(self, image_prompt: str) -> str:
        data = await self._request(
            "POST",
            "/api/styling/image",
            json={"imagePrompt": image_prompt},
            fallback="Failed to generate outfit image",
        )
        return _image_data_url(data)

    async def get_tote_bag_design(
        self,
        user_images: Sequence[EncodedImage],
        additional_material: Optional[str] = None,
    ) -> ToteBagRecommendation:
        payload: Dict[str, Any] = {"userImages": [img.model_dump(by_alias=True) for img in user_images]}
        if additional_material:
            payload["additionalMaterial"] = additional_material
        data = await self._request(
            "POST",
            "/api/sustainability/design",
            json=payload,
            fallback="Failed to get tote bag design",
        )
        return _parse(ToteBagRecommendation, data)

    async def generate_tote_bag_image(
        self,
        image_prompt: str,
        user_images: Optional[Sequence[EncodedImage]] = None,
    ) -> str:
        payload: Dict[str, Any] = {"imagePrompt": image_prompt}
        if user_images:
            payload["userImages"] = [img.model_dump(by_alias=True) for img in user_images]
        data = await self._request(
            "POST",
            "/api/sustainability/image",
            json=payload,
            fallback="Failed to generate tote bag image",
        )
        return _image_data_url(data)

    def encode_body(self, payload: Dict[str, Any]) -> bytes:
        """Serialise *payload* and enforce the request size ceiling."""

        body = json.dumps(payload).encode("utf-8")
        size_mb = len(body) / _BYTES_PER_MB
        if size_mb > self._max_request_mb:
            raise RequestTooLargeError(size_mb, self._max_request_mb)
        return body

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        url: str,
        *,
        fallback: str,
        content: Optional[bytes] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {"Content-Type": "application/json"} if content is not None else None
        logger.debug("%s %s", method, url)
        try:
            resp = await self._client.request(method, url, content=content, json=json, headers=headers)
        except httpx.TransportError as exc:
            raise ServiceUnreachableError(
                "Network error: Unable to reach the server. Please check your connection and ensure the "
                f"server is running. Original error: {exc}"
            ) from exc

        if resp.status_code >= 400:
            try:
                err_json = resp.json()
            except ValueError:
                err_json = None
            detail = err_json.get("detail") if isinstance(err_json, dict) else None
            message = detail if isinstance(detail, str) and detail else f"{fallback} ({resp.status_code} {resp.reason_phrase})"
            raise StylecraftAPIError(resp.status_code, message, err_json)

        try:
            return resp.json()
        except ValueError as exc:
            raise StylecraftAPIError(resp.status_code, f"{fallback}: response is not JSON") from exc


# ------------------------------------------------------------------
# Helper functions
# ------------------------------------------------------------------


def _parse(model: Type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise StylecraftAPIError(200, f"Malformed {model.__name__} response: {exc}", data) from exc


def _image_data_url(data: Any) -> str:
    url = data.get("imageDataUrl") if isinstance(data, dict) else None
    if not isinstance(url, str) or not url.startswith("data:"):
        raise StylecraftAPIError(200, "Malformed image response: missing imageDataUrl", data)
    return url
