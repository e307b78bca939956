"""Gemini API backend for image edits, transcription and captions."""

from __future__ import annotations

import base64
import logging

from ..errors import NoImageReturnedError, RemoteCallError
from ..media import AudioAsset, ImageAsset, verify_image_bytes
from ..presets import AspectRatio
from . import StudioBackend
from .prompts import TRANSCRIBE_PROMPT, caption_prompt, edit_instruction

logger = logging.getLogger(__name__)


class GeminiStudioBackend(StudioBackend):
    """Edit jewelry photos and write text using Google Gemini."""

    def __init__(
        self,
        api_key: str = "",
        image_model: str = "gemini-2.5-flash-image",
        text_model: str = "gemini-2.5-flash",
    ) -> None:
        self._api_key = api_key
        self._image_model = image_model
        self._text_model = text_model

    def _model(self, name: str):
        if not self._api_key:
            raise ValueError(
                "Gemini API key is not set. "
                "Check the config file or the GEMINI_API_KEY environment variable."
            )

        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        return genai.GenerativeModel(name)

    async def edit_image(
        self,
        image: ImageAsset,
        prompt: str,
        aspect_ratio: AspectRatio | None = None,
    ) -> ImageAsset:
        model = self._model(self._image_model)
        parts = [
            {"mime_type": image.mime_type, "data": image.data},
            edit_instruction(prompt, aspect_ratio),
        ]
        response = await model.generate_content_async(parts)
        return _extract_image(response)

    async def transcribe_audio(self, audio: AudioAsset) -> str:
        model = self._model(self._text_model)
        parts = [
            {"mime_type": audio.mime_type, "data": audio.data},
            TRANSCRIBE_PROMPT,
        ]
        response = await model.generate_content_async(parts)
        return _response_text(response)

    async def generate_caption(self, image: ImageAsset, idea: str = "") -> str:
        model = self._model(self._text_model)
        parts = [
            {"mime_type": image.mime_type, "data": image.data},
            caption_prompt(idea),
        ]
        response = await model.generate_content_async(parts)
        caption = _response_text(response)
        if not caption:
            raise RemoteCallError("The model returned an empty caption.")
        return caption


def _extract_image(response) -> ImageAsset:
    """Return the first inline image part of a Gemini response."""
    candidates = getattr(response, "candidates", None) or []
    for candidate in candidates[:1]:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            data = getattr(inline, "data", None) if inline is not None else None
            if not data:
                continue
            if isinstance(data, str):
                data = base64.b64decode(data)
            mime_type = verify_image_bytes(data)
            return ImageAsset(data=data, mime_type=mime_type)

    raise NoImageReturnedError("No image was returned by the model.")


def _response_text(response) -> str:
    try:
        text = response.text
    except ValueError:
        # No text parts (e.g. blocked or silent audio)
        logger.debug("Gemini response had no text parts")
        return ""
    return (text or "").strip()
