"""Generative AI backend base class and factories."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .prompts import REQUIRED_CALL_TO_ACTIONS, missing_call_to_actions

if TYPE_CHECKING:
    from ..config import StudioConfig
    from ..media import AudioAsset, ImageAsset
    from ..presets import AspectRatio


class StudioBackend(ABC):
    """Abstract base for the remote image-edit, transcription and caption calls."""

    @abstractmethod
    async def edit_image(
        self,
        image: ImageAsset,
        prompt: str,
        aspect_ratio: AspectRatio | None = None,
    ) -> ImageAsset:
        """Apply a photographic edit and return the new image.

        Raises NoImageReturnedError if the model answers without an image.
        """
        ...

    @abstractmethod
    async def transcribe_audio(self, audio: AudioAsset) -> str:
        """Transcribe a dictated clip. The result may be empty."""
        ...

    @abstractmethod
    async def generate_caption(self, image: ImageAsset, idea: str = "") -> str:
        """Write a social media caption for the image."""
        ...


def create_backend(config: StudioConfig) -> StudioBackend:
    """Create the image-edit/transcription backend."""
    from .gemini import GeminiStudioBackend

    return GeminiStudioBackend(
        api_key=config.gemini.api_key,
        image_model=config.gemini.image_model,
        text_model=config.gemini.text_model,
    )


def create_caption_backend(config: StudioConfig) -> StudioBackend:
    """Create the backend used for captions, based on configuration."""
    backend_name = config.captions.backend

    match backend_name:
        case "gemini":
            return create_backend(config)
        case "claude":
            from .claude import ClaudeCaptionBackend

            return ClaudeCaptionBackend(
                api_key=config.claude.api_key,
                model=config.claude.model,
            )
        case _:
            raise ValueError(
                f"Unknown caption backend: {backend_name!r} "
                f"(choose gemini or claude)"
            )


__all__ = [
    "REQUIRED_CALL_TO_ACTIONS",
    "StudioBackend",
    "create_backend",
    "create_caption_backend",
    "missing_call_to_actions",
]
