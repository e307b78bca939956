"""Claude API backend for social media captions."""

from __future__ import annotations

from ..errors import RemoteCallError
from ..media import AudioAsset, ImageAsset
from ..presets import AspectRatio
from . import StudioBackend
from .prompts import caption_prompt


class ClaudeCaptionBackend(StudioBackend):
    """Write captions using Claude's vision capability.

    Claude cannot return images or read audio, so only captions are supported.
    """

    def __init__(self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def edit_image(
        self,
        image: ImageAsset,
        prompt: str,
        aspect_ratio: AspectRatio | None = None,
    ) -> ImageAsset:
        raise RemoteCallError("Image edits are not supported by the Claude backend.")

    async def transcribe_audio(self, audio: AudioAsset) -> str:
        raise RemoteCallError("Transcription is not supported by the Claude backend.")

    async def generate_caption(self, image: ImageAsset, idea: str = "") -> str:
        if not self._api_key:
            raise ValueError(
                "Anthropic API key is not set. "
                "Check the config file or the ANTHROPIC_API_KEY environment variable."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        content: list[dict] = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": image.mime_type,
                    "data": image.b64(),
                },
            },
            {"type": "text", "text": caption_prompt(idea)},
        ]

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        response = await client.messages.create(
            model=self._model,
            max_tokens=1024,
            messages=[{"role": "user", "content": content}],
        )

        text = "".join(
            getattr(block, "text", "") for block in response.content
        ).strip()
        if not text:
            raise RemoteCallError("The model returned an empty caption.")
        return text
