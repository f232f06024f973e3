from __future__ import annotations

import json

import httpx
import pytest

from helpers import png_data_url
from stylecraft.models import EncodedImage
from stylecraft.services.api_client import (
    RequestTooLargeError,
    ServiceUnreachableError,
    StylecraftAPIError,
    StylecraftClient,
)


def _client(handler, **kwargs) -> StylecraftClient:
    return StylecraftClient(base_url="http://api.local", transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_outfit_recommendation_round_trip(garment, outfit_payload):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=outfit_payload)

    async with _client(handler) as client:
        rec = await client.get_outfit_recommendation("summer picnic", garment, [garment, garment])

    assert seen["path"] == "/api/styling/recommend"
    assert seen["body"]["prompt"] == "summer picnic"
    assert seen["body"]["userImage"] == {"base64": garment.data, "mimeType": "image/png"}
    assert len(seen["body"]["inventoryImages"]) == 2
    assert rec.title == "Picnic Ready"


@pytest.mark.asyncio
async def test_oversized_recommendation_is_rejected_before_sending(garment):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("request must not be sent")

    big = EncodedImage(data="A" * (52 * 1024 * 1024), media_type="image/png")
    async with _client(handler) as client:
        with pytest.raises(RequestTooLargeError) as excinfo:
            await client.get_outfit_recommendation("gala", garment, [big])

    assert excinfo.value.size_mb > 52
    assert "Request body is too large (52.00MB)" in str(excinfo.value)


@pytest.mark.asyncio
async def test_size_ceiling_is_configurable(garment):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    async with _client(handler, max_request_mb=0.0001) as client:
        with pytest.raises(RequestTooLargeError):
            await client.get_outfit_recommendation("gala", garment, [garment])
    assert calls == []


@pytest.mark.asyncio
async def test_application_error_uses_server_detail(garment):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "GEMINI_API_KEY is not set"})

    async with _client(handler) as client:
        with pytest.raises(StylecraftAPIError) as excinfo:
            await client.get_outfit_recommendation("gala", garment, [garment])

    assert excinfo.value.status == 500
    assert str(excinfo.value) == "GEMINI_API_KEY is not set"


@pytest.mark.asyncio
async def test_application_error_without_detail_uses_status(garment):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    async with _client(handler) as client:
        with pytest.raises(StylecraftAPIError) as excinfo:
            await client.get_tote_bag_design([garment])

    assert str(excinfo.value) == "Failed to get tote bag design (502 Bad Gateway)"


@pytest.mark.asyncio
async def test_unreachable_server_is_distinguished():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(ServiceUnreachableError) as excinfo:
            await client.get_inventory()

    assert str(excinfo.value).startswith("Network error: Unable to reach the server.")


@pytest.mark.asyncio
async def test_malformed_recommendation_body_is_reported(garment):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"title": "only a title"})

    async with _client(handler) as client:
        with pytest.raises(StylecraftAPIError, match="Malformed OutfitRecommendation"):
            await client.get_outfit_recommendation("gala", garment, [garment])


@pytest.mark.asyncio
async def test_image_endpoints_return_data_url(garment):
    seen = []
    data_url = png_data_url()

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={"imageDataUrl": data_url})

    async with _client(handler) as client:
        assert await client.generate_outfit_image("a look") == data_url
        assert await client.generate_tote_bag_image("a bag", [garment]) == data_url

    assert seen[0] == ("/api/styling/image", {"imagePrompt": "a look"})
    assert seen[1][0] == "/api/sustainability/image"
    assert seen[1][1]["userImages"][0]["mimeType"] == "image/png"


@pytest.mark.asyncio
async def test_image_endpoint_without_image_is_an_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"detail": "No image generated"})

    async with _client(handler) as client:
        with pytest.raises(StylecraftAPIError) as excinfo:
            await client.generate_outfit_image("a look")

    assert excinfo.value.status == 422
    assert str(excinfo.value) == "No image generated"


@pytest.mark.asyncio
async def test_tote_design_sends_material_only_when_given(garment, tote_payload):
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=tote_payload)

    async with _client(handler) as client:
        await client.get_tote_bag_design([garment])
        rec = await client.get_tote_bag_design([garment], "corduroy")

    assert "additionalMaterial" not in bodies[0]
    assert bodies[1]["additionalMaterial"] == "corduroy"
    assert rec.material_type == "denim"


@pytest.mark.asyncio
async def test_inventory_is_parsed():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"id": 1, "src": "https://x/a.png", "alt": "A"}])

    async with _client(handler) as client:
        items = await client.get_inventory()

    assert items[0].src == "https://x/a.png"
