from __future__ import annotations

import base64
import logging
from typing import Any, List, Sequence

from google import genai
from google.genai import types
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_core.output_parsers import PydanticOutputParser
from langchain_google_genai import ChatGoogleGenerativeAI

from stylecraft.config import Settings
from stylecraft.models import EncodedImage

from .base import ConfigurationError, GenerationError, GenerativeProvider, ImageNotProducedError, ModelT

logger = logging.getLogger(__name__)


class GeminiProvider(GenerativeProvider):
    name = "gemini"

    def __init__(self, settings: Settings) -> None:
        if not settings.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY is not set")
        self._text_model = settings.gemini_text_model
        self._image_model = settings.gemini_image_model
        self._max_retries = settings.gemini_max_retries
        self._llm = ChatGoogleGenerativeAI(
            model=settings.gemini_text_model,
            google_api_key=settings.gemini_api_key,
            temperature=settings.gemini_temperature,
            response_mime_type="application/json",
        )
        self._client = genai.Client(api_key=settings.gemini_api_key)

    async def generate_structured(
        self,
        instruction: str,
        images: Sequence[EncodedImage],
        *,
        system_instruction: str,
        response_model: type[ModelT],
    ) -> ModelT:
        """Run a multimodal prompt and parse the JSON answer into *response_model*."""

        parser = PydanticOutputParser(pydantic_object=response_model)
        messages = build_messages(
            instruction,
            images,
            system_instruction=f"{system_instruction}\n\n{parser.get_format_instructions()}",
        )
        chain = (self._llm | parser).with_retry(stop_after_attempt=self._max_retries + 1)

        logger.debug("Structured request to %s with %d image(s)", self._text_model, len(images))
        try:
            return await chain.ainvoke(messages)
        except Exception as exc:
            raise GenerationError(f"Failed to generate {response_model.__name__}: {exc}") from exc

    async def generate_image(self, prompt: str, images: Sequence[EncodedImage] = ()) -> str:
        logger.debug("Image request to %s with %d reference image(s)", self._image_model, len(images))
        try:
            parts: List[Any] = [types.Part.from_text(text=prompt)]
            parts.extend(types.Part.from_bytes(data=img.raw_bytes(), mime_type=img.media_type) for img in images)
            response = await self._client.aio.models.generate_content(
                model=self._image_model,
                contents=parts,
                config=types.GenerateContentConfig(response_modalities=["IMAGE"]),
            )
        except Exception as exc:
            raise GenerationError(f"Failed to generate image: {exc}") from exc

        data_url = first_inline_image(response)
        if data_url is None:
            raise ImageNotProducedError()
        return data_url


# ------------------------------------------------------------------
# Helper functions
# ------------------------------------------------------------------


def build_messages(
    instruction: str,
    images: Sequence[EncodedImage],
    *,
    system_instruction: str,
) -> List[BaseMessage]:
    content: List[Any] = [{"type": "text", "text": instruction}]
    content.extend({"type": "image_url", "image_url": img.to_data_url()} for img in images)
    return [SystemMessage(content=system_instruction), HumanMessage(content=content)]


def first_inline_image(response: Any) -> str | None:
    """Return the first inline image of a generate_content response as a data URL."""

    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return None
    for part in candidates[0].content.parts or []:
        inline = getattr(part, "inline_data", None)
        if inline is not None and inline.data:
            encoded = base64.b64encode(inline.data).decode("ascii")
            return f"data:{inline.mime_type or 'image/png'};base64,{encoded}"
    return None
