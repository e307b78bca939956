"""Coordinates the remote edit, transcription, caption and upload calls.

Each operation type has its own pending flag: a second call of the same
type while one is in flight is rejected, but different types may run side
by side since they touch disjoint parts of the session. Failures never
propagate out of an operation. They are logged, turned into a single
message on ``session.error``, and the operation returns None with the
session otherwise unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Awaitable

from .ai import missing_call_to_actions
from .errors import (
    OperationCancelledError,
    RemoteCallError,
    StudioError,
    ValidationError,
)
from .media import AudioAsset, ImageAsset, export_filename
from .presets import AspectRatio

if TYPE_CHECKING:
    from .ai import StudioBackend
    from .gdrive import DriveFile, GoogleDriveUploader
    from .recorder import MicrophoneRecorder
    from .session import HistoryEntry, StudioSession

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    EDIT = "edit"
    TRANSCRIBE = "transcribe"
    CAPTION = "caption"
    UPLOAD = "upload"


_FAILURE_MESSAGES = {
    Operation.EDIT: "Error generating edit.",
    Operation.TRANSCRIBE: "Transcription failed.",
    Operation.CAPTION: "Error generating caption.",
    Operation.UPLOAD: "Upload to Google Drive failed.",
}


def validate_edit_request(image: ImageAsset | None, prompt: str) -> None:
    """Reject an edit that must not reach the network.

    Raises:
        ValidationError: If there is no image or the prompt is blank.
    """
    if image is None:
        raise ValidationError("Upload a photo before editing.")
    if not prompt or not prompt.strip():
        raise ValidationError("Please describe the edit.")


class EditOrchestrator:
    """Runs remote operations against a StudioSession."""

    def __init__(
        self,
        session: StudioSession,
        backend: StudioBackend,
        caption_backend: StudioBackend | None = None,
        uploader: GoogleDriveUploader | None = None,
        timeout: float | None = 120.0,
    ) -> None:
        self.session = session
        self._backend = backend
        self._caption_backend = caption_backend or backend
        self._uploader = uploader
        self._timeout = timeout
        self._pending: set[Operation] = set()
        self._inflight: dict[Operation, asyncio.Future] = {}
        self._cancel_requested: set[Operation] = set()

    def pending(self, op: Operation | str) -> bool:
        return Operation(op) in self._pending

    @property
    def busy(self) -> bool:
        return bool(self._pending)

    def cancel(self, op: Operation | str) -> bool:
        """Cancel the in-flight remote call of ``op``.

        Returns False if nothing of that type is running.
        """
        op = Operation(op)
        future = self._inflight.get(op)
        if future is None or future.done():
            return False
        self._cancel_requested.add(op)
        future.cancel()
        logger.info("Cancelling %s request", op.value)
        return True

    def cancel_all(self) -> list[Operation]:
        """Cancel every in-flight remote call, e.g. when the screen is left."""
        return [op for op in list(self._inflight) if self.cancel(op)]

    async def apply_edit(
        self,
        prompt: str | None = None,
        aspect_ratio: AspectRatio | str | None = None,
    ) -> HistoryEntry | None:
        """Edit the session's original photo and commit the result."""
        session = self.session
        if Operation.EDIT in self._pending:
            logger.debug("Ignoring edit request: one is already in progress")
            return None
        if prompt is not None:
            session.prompt = prompt
        prompt = session.prompt
        source = session.original
        try:
            validate_edit_request(source, prompt)
            ratio = (
                AspectRatio.parse(aspect_ratio)
                if aspect_ratio is not None
                else session.aspect_ratio
            )
        except (ValidationError, ValueError) as e:
            session.error = str(e)
            return None

        processed = await self._run(
            Operation.EDIT,
            lambda: self._backend.edit_image(source, prompt, ratio),
        )
        if processed is None:
            return None

        if session.original is not source:
            logger.warning("Discarding edit: the photo changed while it was running")
            session.error = "The photo changed while the edit was running."
            return None

        entry = session.commit_edit(processed, prompt)
        logger.info("Edit committed (%d in history)", len(session.history))
        return entry

    async def transcribe(self, audio: AudioAsset) -> str | None:
        """Transcribe dictation and append it to the prompt."""
        text = await self._run(
            Operation.TRANSCRIBE,
            lambda: self._backend.transcribe_audio(audio),
        )
        if text is None:
            return None
        self.session.append_transcript(text)
        return text

    async def transcribe_recording(self, recorder: MicrophoneRecorder) -> str | None:
        """Stop a running recording, releasing the microphone, then transcribe it."""
        try:
            audio = recorder.stop()
        except StudioError as e:
            self.session.error = str(e)
            return None
        except Exception as e:
            logger.exception("Stopping the recording failed")
            self.session.error = f"{_FAILURE_MESSAGES[Operation.TRANSCRIBE]} {e}"
            return None
        return await self.transcribe(audio)

    async def generate_caption(self, idea: str = "") -> str | None:
        """Write a caption for the processed photo, or the original if unedited."""
        image = self.session.current_image
        if image is None:
            self.session.error = "Upload a photo before writing a caption."
            return None

        caption = await self._run(
            Operation.CAPTION,
            lambda: self._caption_backend.generate_caption(image, idea),
        )
        if caption is None:
            return None

        missing = missing_call_to_actions(caption)
        if missing:
            logger.warning("Caption is missing call-to-action lines: %s", missing)
        self.session.caption = caption
        return caption

    async def upload_processed(
        self,
        filename: str | None = None,
        folder_id: str | None = None,
    ) -> DriveFile | None:
        """Upload the processed photo to Google Drive."""
        image = self.session.processed
        if self._uploader is None:
            self.session.error = "Google Drive is not configured."
            return None
        if image is None:
            self.session.error = "There is no edited photo to upload."
            return None

        uploader = self._uploader
        name = filename or export_filename()
        return await self._run(
            Operation.UPLOAD,
            lambda: uploader.upload_image_async(image, name, folder_id),
        )

    async def _run(self, op: Operation, call):
        """Run one remote call of type ``op`` under the pending flag."""
        session = self.session
        if op in self._pending:
            # Same as pressing a disabled control
            logger.debug("Ignoring %s request: one is already in progress", op.value)
            return None

        self._pending.add(op)
        session.error = None
        logger.info("%s request started", op.value)
        try:
            result = await self._await_remote(op, call())
        except StudioError as e:
            logger.warning("%s request failed: %s", op.value, e)
            session.error = str(e)
            return None
        except Exception as e:
            logger.exception("%s request failed", op.value)
            session.error = f"{_FAILURE_MESSAGES[op]} {e}".strip()
            return None
        finally:
            self._pending.discard(op)

        logger.info("%s request finished", op.value)
        return result

    async def _await_remote(self, op: Operation, coro: Awaitable):
        future = asyncio.ensure_future(coro)
        self._inflight[op] = future
        try:
            return await asyncio.wait_for(future, self._timeout)
        except asyncio.TimeoutError as e:
            raise RemoteCallError(
                f"The {op.value} request timed out after {self._timeout:g}s."
            ) from e
        except asyncio.CancelledError:
            if op not in self._cancel_requested:
                raise
            raise OperationCancelledError(
                f"The {op.value} request was cancelled."
            ) from None
        finally:
            self._inflight.pop(op, None)
            self._cancel_requested.discard(op)
