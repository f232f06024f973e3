from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence, TypeVar

from pydantic import BaseModel

from stylecraft.models import EncodedImage

ModelT = TypeVar("ModelT", bound=BaseModel)


class ConfigurationError(Exception):
    """Provider cannot be built from the current settings."""


class GenerationError(Exception):
    """The generative model failed or returned an unusable response."""


class ImageNotProducedError(GenerationError):
    """The model answered but produced no image for the description."""

    def __init__(self, message: str = "No image generated"):
        super().__init__(message)


class GenerativeProvider(ABC):
    """Abstract interface for a multimodal generative-model provider."""

    name: str = "abstract"

    @abstractmethod
    async def generate_structured(
        self,
        instruction: str,
        images: Sequence[EncodedImage],
        *,
        system_instruction: str,
        response_model: type[ModelT],
    ) -> ModelT:
        """Ask the model for a JSON answer validated against *response_model*.

        Images are sent after the instruction text, in the given order.
        """

    @abstractmethod
    async def generate_image(self, prompt: str, images: Sequence[EncodedImage] = ()) -> str:
        """Render an image and return it as a ``data:`` URL.

        Raises
        ------
        ImageNotProducedError
            If the model returned no inline image.
        """
