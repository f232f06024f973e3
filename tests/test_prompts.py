from __future__ import annotations

import pytest

from helpers import FakeProvider, png_data_url
from stylecraft.models import OutfitRecommendation, ToteBagRecommendation
from stylecraft.services.llm import ImageNotProducedError
from stylecraft.services.styling import StylingService, styling_instruction
from stylecraft.services.sustainability import SustainabilityService, design_instruction, normalize_material


def test_styling_instruction_quotes_context():
    assert styling_instruction("office party") == (
        "Style the user's garment (first image) using items from the inventory "
        '(subsequent images) for: "office party"'
    )


@pytest.mark.parametrize("material", [None, "", "  ", "plain", "PLAIN"])
def test_plain_material_means_uploaded_clothing_only(material):
    assert normalize_material(material) is None
    assert "Use ONLY the uploaded clothing material" in design_instruction(material)


def test_additional_material_is_incorporated():
    text = design_instruction("corduroy")
    assert "incorporate corduroy material into the design" in text
    assert "Use ONLY" not in text


@pytest.mark.asyncio
async def test_styling_service_orders_images(garment, outfit_payload):
    provider = FakeProvider(structured=outfit_payload)
    other = garment.model_copy(update={"media_type": "image/jpeg"})

    rec = await StylingService(provider).recommend("brunch", garment, [other])

    assert isinstance(rec, OutfitRecommendation)
    assert provider.calls[0]["images"] == [garment, other]
    assert provider.calls[0]["response_model"] is OutfitRecommendation


@pytest.mark.asyncio
async def test_sustainability_service(garment, tote_payload):
    provider = FakeProvider(structured=tote_payload, image=png_data_url())
    service = SustainabilityService(provider)

    rec = await service.design([garment], "plain")
    await service.render(rec.image_description, [garment])

    assert isinstance(rec, ToteBagRecommendation)
    assert "sustainable fashion designer" in provider.calls[0]["system_instruction"]
    assert provider.calls[1] == {"kind": "image", "prompt": rec.image_description, "images": [garment]}


@pytest.mark.asyncio
async def test_sustainability_service_requires_photos():
    with pytest.raises(ValueError):
        await SustainabilityService(FakeProvider()).design([])


@pytest.mark.asyncio
async def test_render_propagates_no_image_outcome():
    with pytest.raises(ImageNotProducedError):
        await StylingService(FakeProvider(image=None)).render("a look")
