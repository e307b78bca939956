"""Image and audio payloads and their transport encoding."""

from __future__ import annotations

import base64
import binascii
import io
import mimetypes
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable

from PIL import Image, UnidentifiedImageError

from .errors import RemoteCallError

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,")


@dataclass(frozen=True)
class ImageAsset:
    """An image payload with its MIME type."""

    data: bytes
    mime_type: str = "image/jpeg"

    def b64(self) -> str:
        return base64.standard_b64encode(self.data).decode()

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.b64()}"

    @classmethod
    def from_data_url(cls, value: str, default_mime: str = "image/jpeg") -> ImageAsset:
        """Decode a ``data:`` URL, or bare base64 text.

        Raises:
            ValueError: If the payload is not valid base64.
        """
        mime_type = default_mime
        match = _DATA_URL_RE.match(value)
        if match:
            mime_type = match.group("mime")
            value = value[match.end():]
        try:
            data = base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 image payload: {e}") from e
        return cls(data=data, mime_type=mime_type)


@dataclass(frozen=True)
class AudioAsset:
    """A recorded audio clip."""

    data: bytes
    mime_type: str = "audio/wav"

    def b64(self) -> str:
        return base64.standard_b64encode(self.data).decode()


def is_image_mime(mime_type: str | None) -> bool:
    return bool(mime_type) and mime_type.lower().startswith("image/")


def load_image_file(path: str | Path) -> ImageAsset | None:
    """Read a picked file as an image.

    Returns None when the file is not an image type.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    mime_type = mimetypes.guess_type(path.name)[0]
    if not is_image_mime(mime_type):
        return None
    return ImageAsset(data=path.read_bytes(), mime_type=mime_type)


def load_audio_file(path: str | Path) -> AudioAsset:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    mime_type = mimetypes.guess_type(path.name)[0] or "audio/wav"
    return AudioAsset(data=path.read_bytes(), mime_type=mime_type)


def image_from_clipboard(items: Iterable[tuple[str, bytes]]) -> ImageAsset | None:
    """Pick the first image item from pasted clipboard content.

    ``items`` are ``(mime_type, payload)`` pairs. Non-image items are
    ignored; None is returned if nothing usable was pasted.
    """
    for mime_type, payload in items:
        if is_image_mime(mime_type) and payload:
            return ImageAsset(data=payload, mime_type=mime_type)
    return None


def verify_image_bytes(data: bytes) -> str:
    """Check that ``data`` decodes as an image and return its MIME type.

    Raises:
        RemoteCallError: If the bytes are empty, truncated or not an image.
    """
    if not data:
        raise RemoteCallError("The model returned an empty image.")
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise RemoteCallError(f"The model returned an unreadable image: {e}") from e
    return Image.MIME.get(fmt or "", "image/jpeg")


def export_filename(when: datetime | None = None) -> str:
    """File name used when saving a processed image."""
    when = when or datetime.now()
    return f"CM_Studio_{when.strftime('%Y%m%d')}.jpg"


def save_image(
    image: ImageAsset,
    directory: str | Path,
    filename: str | None = None,
) -> Path:
    """Write an image into ``directory`` and return the written path."""
    directory = Path(directory).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / (filename or export_filename())
    target.write_bytes(image.data)
    return target
