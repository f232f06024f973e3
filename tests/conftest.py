from __future__ import annotations

import pytest

from helpers import SleepRecorder, make_png
from stylecraft.config import Settings
from stylecraft.models import EncodedImage


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        gemini_api_key=None,
        gcs_bucket_name="test-bucket",
        gcs_inventory_path=None,
        public_base_url="http://assets.local",
        api_base_url="http://api.local",
    )


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def garment() -> EncodedImage:
    return EncodedImage.from_bytes(make_png(), "image/png")


@pytest.fixture
def outfit_payload() -> dict:
    return {
        "title": "Picnic Ready",
        "justification": "Light linen keeps things breezy while the loafers add polish.",
        "accessories": ["Straw hat", "Woven tote"],
        "color_palette": ["ivory", "navy", "tan"],
        "image_description": "A person in a white linen shirt and navy chinos on a sunny lawn.",
    }


@pytest.fixture
def tote_payload() -> dict:
    return {
        "title": "Denim Memory Tote",
        "description": "Two pairs of jeans become a sturdy everyday tote.",
        "material_type": "denim",
        "design_features": ["Back pockets kept as outer pockets", "Waistband handles"],
        "color_palette": ["indigo", "stonewash"],
        "image_description": "A tote bag made of patched denim with jean pockets on the front.",
    }
