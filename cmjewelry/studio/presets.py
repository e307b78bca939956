"""Preset edit styles and output aspect ratios."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AspectRatio(str, Enum):
    FEED = "4:5"
    STORY = "9:16"

    @classmethod
    def parse(cls, value: str | AspectRatio) -> AspectRatio:
        if isinstance(value, AspectRatio):
            return value
        for ratio in cls:
            if ratio.value == value.strip():
                return ratio
        raise ValueError(
            f"Unknown aspect ratio: {value!r} "
            f"(choose from {', '.join(r.value for r in cls)})"
        )


@dataclass(frozen=True)
class Preset:
    id: str
    name: str
    icon: str
    prompt: str


PRESETS: tuple[Preset, ...] = (
    Preset(
        id="minimal",
        name="Minimalist Pro",
        icon="◻️",
        prompt=(
            "Clean, minimalist jewelry photography. Soft diffused lighting, "
            "neutral light grey background, ultra-sharp focus on the jewelry, "
            "remove imperfections. High-end catalog style."
        ),
    ),
    Preset(
        id="remove-bg",
        name="Remove Background",
        icon="✂️",
        prompt=(
            "Remove the background completely. Place the jewelry on a clean, "
            "pure white background with a soft, natural drop shadow. "
            "Professional e-commerce look."
        ),
    ),
    Preset(
        id="black-gloves",
        name="Black Gloves",
        icon="🧤",
        prompt=(
            "Show the jewelry being elegantly held by a hand wearing formal, "
            "high-end black velvet gloves. Dark, moody, luxurious atmosphere."
        ),
    ),
    Preset(
        id="black-grey",
        name="Dark Mode",
        icon="⚫",
        prompt=(
            "Place the jewelry on a premium background with a smooth gradient "
            "from black to dark grey. Cinematic lighting, high contrast, "
            "sharp details."
        ),
    ),
    Preset(
        id="high-contrast",
        name="High Contrast",
        icon="⚡",
        prompt=(
            "High contrast black and white photography style. Dramatic "
            "lighting, sharp reflections, metallic textures."
        ),
    ),
)


def get_preset(preset_id: str) -> Preset:
    for preset in PRESETS:
        if preset.id == preset_id:
            return preset
    raise KeyError(f"Unknown preset: {preset_id!r}")
