"""AI photo studio for CM Jewelry: edits, dictation, captions and sales."""

from .ai import StudioBackend, create_backend, create_caption_backend
from .config import (
    GDriveConfig,
    LedgerConfig,
    StudioConfig,
    load_config,
)
from .errors import (
    LedgerError,
    MicrophoneAccessError,
    NoImageReturnedError,
    OperationCancelledError,
    RemoteCallError,
    StoragePermissionError,
    StudioError,
    ValidationError,
)
from .media import AudioAsset, ImageAsset, image_from_clipboard, load_image_file
from .orchestrator import EditOrchestrator, Operation, validate_edit_request
from .presets import PRESETS, AspectRatio, Preset, get_preset
from .sales import LedgerReceipt, SaleLedger, SaleRecord, StaffRoster
from .session import HistoryEntry, StudioSession

__all__ = [
    "StudioBackend",
    "create_backend",
    "create_caption_backend",
    "StudioConfig",
    "LedgerConfig",
    "GDriveConfig",
    "load_config",
    "StudioError",
    "ValidationError",
    "MicrophoneAccessError",
    "StoragePermissionError",
    "RemoteCallError",
    "NoImageReturnedError",
    "OperationCancelledError",
    "LedgerError",
    "ImageAsset",
    "AudioAsset",
    "load_image_file",
    "image_from_clipboard",
    "EditOrchestrator",
    "Operation",
    "validate_edit_request",
    "AspectRatio",
    "Preset",
    "PRESETS",
    "get_preset",
    "SaleRecord",
    "StaffRoster",
    "SaleLedger",
    "LedgerReceipt",
    "StudioSession",
    "HistoryEntry",
]
