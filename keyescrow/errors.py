"""
Error taxonomy for an escrow run.

Fatal errors (InputError, ConfigError, LogWriteError) abort the run before
the CSV is written. The rest are caught at the per-device boundary and turned
into a Failed outcome record.
"""

from __future__ import annotations

from pathlib import Path


class EscrowError(Exception):
    """Base class for all keyescrow errors."""


class ConfigError(EscrowError):
    """Required configuration is missing or malformed."""


class InputError(EscrowError):
    """The identifier list is missing or contains no identifiers."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Input file {self.path}: {reason}")


class ResolutionError(EscrowError):
    """An identifier could not be resolved to a device."""

    def __init__(self, object_id: str, reason: str = "device not found"):
        self.object_id = object_id
        super().__init__(f"Could not resolve {object_id}: {reason}")


class DataError(EscrowError):
    """A resolved device or key is missing data needed to continue."""


class StoreError(EscrowError):
    """The secret store rejected a write."""


class LogWriteError(EscrowError):
    """The audit log could not be appended to after all retries."""

    def __init__(self, path: Path | str, cause: BaseException):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Could not write audit log {self.path}: {cause}")
