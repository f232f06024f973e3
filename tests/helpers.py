from __future__ import annotations

import io
from typing import List, Sequence

from PIL import Image

from stylecraft.models import EncodedImage
from stylecraft.services.llm import GenerativeProvider, ImageNotProducedError


def make_png(width: int = 8, height: int = 4, color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def png_data_url(width: int = 8, height: int = 4) -> str:
    return EncodedImage.from_bytes(make_png(width, height), "image/png").to_data_url()


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeProvider(GenerativeProvider):
    name = "fake"

    def __init__(self, structured=None, image: str | None = None, error: Exception | None = None):
        self.structured = structured
        self.image = image
        self.error = error
        self.calls: list[dict] = []

    async def generate_structured(self, instruction, images, *, system_instruction, response_model):
        self.calls.append(
            {
                "kind": "structured",
                "instruction": instruction,
                "images": list(images),
                "system_instruction": system_instruction,
                "response_model": response_model,
            }
        )
        if self.error is not None:
            raise self.error
        return response_model.model_validate(self.structured)

    async def generate_image(self, prompt: str, images: Sequence[EncodedImage] = ()) -> str:
        self.calls.append({"kind": "image", "prompt": prompt, "images": list(images)})
        if self.error is not None:
            raise self.error
        if self.image is None:
            raise ImageNotProducedError()
        return self.image
