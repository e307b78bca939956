"""In-memory editing session and edit history."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass

from .media import ImageAsset
from .presets import AspectRatio, Preset


@dataclass(frozen=True)
class HistoryEntry:
    """A before/after pair and the instruction that produced it."""

    original: ImageAsset
    processed: ImageAsset
    prompt: str
    timestamp: float  # epoch seconds


class StudioSession:
    """Live editing state for one staff member at the studio screen.

    History is kept newest-first. With a ``history_limit`` the oldest entry
    is dropped once the limit is reached; None or a value of 0 or below
    keeps every entry.
    """

    def __init__(
        self,
        history_limit: int | None = 50,
        aspect_ratio: AspectRatio | str = AspectRatio.FEED,
    ) -> None:
        self.original: ImageAsset | None = None
        self.processed: ImageAsset | None = None
        self.prompt: str = ""
        self.caption: str = ""
        self.error: str | None = None
        self.aspect_ratio = AspectRatio.parse(aspect_ratio)
        if history_limit is not None and history_limit <= 0:
            history_limit = None
        self._history: deque[HistoryEntry] = deque(maxlen=history_limit)

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._history)

    @property
    def history_limit(self) -> int | None:
        return self._history.maxlen

    @property
    def current_image(self) -> ImageAsset | None:
        """The processed image if there is one, else the original."""
        return self.processed or self.original

    def set_original(self, image: ImageAsset) -> None:
        """Start a fresh editing context around a new photo."""
        self.original = image
        self.processed = None
        self.prompt = ""
        self.caption = ""
        self.error = None

    def commit_edit(self, processed: ImageAsset, prompt: str) -> HistoryEntry:
        """Make ``processed`` the live result and record it in history."""
        if self.original is None:
            raise ValueError("Cannot commit an edit without an original image")
        self.processed = processed
        entry = HistoryEntry(
            original=self.original,
            processed=processed,
            prompt=prompt,
            timestamp=time.time(),
        )
        self._history.appendleft(entry)
        return entry

    def restore(self, entry: HistoryEntry) -> None:
        """Bring a past edit back as the live state. History is untouched."""
        self.original = entry.original
        self.processed = entry.processed
        self.prompt = entry.prompt
        self.error = None

    def reset(self) -> None:
        """Clear the live state. History survives."""
        self.original = None
        self.processed = None
        self.prompt = ""
        self.caption = ""
        self.error = None

    def append_transcript(self, text: str) -> None:
        text = text.strip()
        if not text:
            return
        self.prompt = f"{self.prompt} {text}" if self.prompt else text

    def apply_preset(self, preset: Preset) -> None:
        self.prompt = preset.prompt
