"""TOML configuration loader for the studio."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class GeminiConfig:
    api_key: str = ""
    image_model: str = "gemini-2.5-flash-image"
    text_model: str = "gemini-2.5-flash"


@dataclass
class ClaudeConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class CaptionConfig:
    backend: str = "gemini"


@dataclass
class StudioOptions:
    default_aspect_ratio: str = "4:5"
    history_limit: int | None = 50
    request_timeout: float = 120.0
    export_dir: str = "."


@dataclass
class StaffConfig:
    members: list[str] = field(default_factory=lambda: ["Carlos", "Mario"])


@dataclass
class AudioConfig:
    sample_rate: int = 16000
    channels: int = 1


@dataclass
class LedgerConfig:
    webhook_url: str = ""
    timeout: float = 15.0
    require_ack: bool = True


@dataclass
class GDriveConfig:
    enabled: bool = False
    access_token: str = ""
    credentials_path: str = "~/.config/cmjewelry/gdrive_credentials.json"
    token_path: str = "~/.config/cmjewelry/gdrive_token.json"
    folder_id: str = ""


@dataclass
class StudioConfig:
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)
    captions: CaptionConfig = field(default_factory=CaptionConfig)
    studio: StudioOptions = field(default_factory=StudioOptions)
    staff: StaffConfig = field(default_factory=StaffConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    gdrive: GDriveConfig = field(default_factory=GDriveConfig)


def load_config(path: str | Path | None = None) -> StudioConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    Secrets can be supplied via environment variables instead.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    gem = raw.get("gemini", {})
    cla = raw.get("claude", {})
    cap = raw.get("captions", {})
    std = raw.get("studio", {})
    stf = raw.get("staff", {})
    aud = raw.get("audio", {})
    led = raw.get("ledger", {})
    gdr = raw.get("gdrive", {})

    # Resolve secrets: config file → environment variable
    gemini_api_key = gem.get("api_key", "") or os.environ.get("GEMINI_API_KEY", "")
    claude_api_key = cla.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )
    drive_token = gdr.get("access_token", "") or os.environ.get(
        "GOOGLE_DRIVE_ACCESS_TOKEN", ""
    )
    webhook_url = led.get("webhook_url", "") or os.environ.get("SALE_LEDGER_URL", "")

    # 0 disables the history bound
    history_limit = std.get("history_limit", 50)
    if history_limit is not None and history_limit <= 0:
        history_limit = None

    return StudioConfig(
        gemini=GeminiConfig(
            api_key=gemini_api_key,
            image_model=gem.get("image_model", "gemini-2.5-flash-image"),
            text_model=gem.get("text_model", "gemini-2.5-flash"),
        ),
        claude=ClaudeConfig(
            api_key=claude_api_key,
            model=cla.get("model", "claude-sonnet-4-5-20250929"),
        ),
        captions=CaptionConfig(
            backend=cap.get("backend", "gemini"),
        ),
        studio=StudioOptions(
            default_aspect_ratio=std.get("default_aspect_ratio", "4:5"),
            history_limit=history_limit,
            request_timeout=float(std.get("request_timeout", 120.0)),
            export_dir=std.get("export_dir", "."),
        ),
        staff=StaffConfig(
            members=list(stf.get("members", ["Carlos", "Mario"])),
        ),
        audio=AudioConfig(
            sample_rate=aud.get("sample_rate", 16000),
            channels=aud.get("channels", 1),
        ),
        ledger=LedgerConfig(
            webhook_url=webhook_url,
            timeout=float(led.get("timeout", 15.0)),
            require_ack=led.get("require_ack", True),
        ),
        gdrive=GDriveConfig(
            enabled=gdr.get("enabled", False),
            access_token=drive_token,
            credentials_path=gdr.get(
                "credentials_path",
                "~/.config/cmjewelry/gdrive_credentials.json",
            ),
            token_path=gdr.get(
                "token_path",
                "~/.config/cmjewelry/gdrive_token.json",
            ),
            folder_id=gdr.get("folder_id", ""),
        ),
    )
