"""Exception types raised by the studio.

Every error carries a message that can be shown to staff as-is.
"""

from __future__ import annotations


class StudioError(Exception):
    """Base class for all studio errors."""


class ValidationError(StudioError):
    """A request was rejected locally, before any network call."""


class MicrophoneAccessError(StudioError, PermissionError):
    """The microphone could not be acquired."""


class StoragePermissionError(StudioError, PermissionError):
    """The storage token was rejected."""


class RemoteCallError(StudioError):
    """A remote service failed or returned an unusable response."""


class NoImageReturnedError(RemoteCallError):
    """The image model answered without an image part."""


class OperationCancelledError(RemoteCallError):
    """An in-flight remote call was cancelled by the user."""


class LedgerError(RemoteCallError):
    """The sale ledger did not acknowledge a sale."""
