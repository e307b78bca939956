"""Microphone capture for voice dictation using sounddevice."""

from __future__ import annotations

import io
import logging
import wave

from .errors import MicrophoneAccessError, ValidationError
from .media import AudioAsset

logger = logging.getLogger(__name__)


class MicrophoneRecorder:
    """Record from the default input device until explicitly stopped.

    The device is held exclusively between ``start()`` and ``stop()`` and
    is released on every exit path.
    """

    def __init__(self, sample_rate: int = 16000, channels: int = 1) -> None:
        self._sample_rate = sample_rate
        self._channels = channels
        self._stream = None
        self._chunks: list = []

    @property
    def recording(self) -> bool:
        return self._stream is not None

    def start(self) -> None:
        """Acquire the microphone and begin buffering audio.

        Raises:
            ValidationError: If a recording is already running.
            MicrophoneAccessError: If the device cannot be opened.
        """
        if self._stream is not None:
            raise ValidationError("A recording is already in progress.")

        try:
            import sounddevice as sd
        except ImportError:
            raise ImportError(
                "sounddevice is required for voice input: pip install 'cmjewelry[audio]'"
            ) from None
        except OSError as e:
            # sounddevice raises OSError when the PortAudio library is missing
            raise MicrophoneAccessError(f"No audio input is available: {e}") from e

        self._chunks = []

        def _callback(indata, frames, time, status) -> None:
            if status:
                logger.debug("Input stream status: %s", status)
            self._chunks.append(indata.copy())

        stream = None
        try:
            stream = sd.InputStream(
                samplerate=self._sample_rate,
                channels=self._channels,
                dtype="int16",
                callback=_callback,
            )
            stream.start()
        except Exception as e:
            if stream is not None:
                stream.close()
            raise MicrophoneAccessError(
                "Microphone access is required for voice input."
            ) from e

        self._stream = stream
        logger.info("Recording started")

    def stop(self) -> AudioAsset:
        """Stop recording, release the device and return the clip as WAV.

        Raises:
            ValidationError: If no recording is running.
            MicrophoneAccessError: If the device fails while stopping.
        """
        if self._stream is None:
            raise ValidationError("No recording is in progress.")

        try:
            self._stream.stop()
        except Exception as e:
            self._chunks = []
            raise MicrophoneAccessError(f"The microphone stopped unexpectedly: {e}") from e
        finally:
            self._release()

        logger.info("Recording stopped")
        return AudioAsset(data=self._encode_wav(), mime_type="audio/wav")

    def close(self) -> None:
        """Release the device without producing audio."""
        if self._stream is not None:
            try:
                self._stream.stop()
            finally:
                self._release()

    def _release(self) -> None:
        stream, self._stream = self._stream, None
        stream.close()

    def _encode_wav(self) -> bytes:
        import numpy as np

        if self._chunks:
            samples = np.concatenate(self._chunks)
        else:
            samples = np.zeros((0, self._channels), dtype=np.int16)
        self._chunks = []

        buf = io.BytesIO()
        with wave.open(buf, "wb") as wav:
            wav.setnchannels(self._channels)
            wav.setsampwidth(2)
            wav.setframerate(self._sample_rate)
            wav.writeframes(samples.astype(np.int16).tobytes())
        return buf.getvalue()

    def __enter__(self) -> MicrophoneRecorder:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
