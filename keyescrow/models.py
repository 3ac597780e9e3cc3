"""
Data models for the escrow pipeline.

All models are plain frozen dataclasses, built through the factory functions
below so every record has the same fixed shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from pathlib import Path


class OutcomeStatus(StrEnum):
    UPLOADED = "Uploaded"
    NOT_FOUND = "NotFound"
    FAILED = "Failed"


@dataclass(frozen=True)
class DeviceIdentity:
    """A device resolved from the identity directory."""

    object_id: str
    device_id: str
    display_name: str = ""

    @property
    def name(self) -> str:
        """Human label, falling back to an identifier when absent."""
        return self.display_name or self.device_id or self.object_id


@dataclass(frozen=True)
class RecoveryKeyInfo:
    """Recovery key metadata from the listing call. Never carries the value."""

    key_id: str
    created_at: datetime | None = None


@dataclass(frozen=True)
class RecoveryKeyRecord:
    """A recovery key with its value, fetched by id."""

    key_id: str
    created_at: datetime | None
    key_value: str

    def __repr__(self) -> str:
        return f"RecoveryKeyRecord(key_id={self.key_id!r}, created_at={self.created_at!r})"


@dataclass(frozen=True)
class OutcomeRecord:
    """One row of the run's audit table."""

    device_name: str
    object_id: str
    recovery_key_id: str
    execution_date: str
    status: OutcomeStatus

    def as_row(self) -> dict[str, str]:
        return {
            "DeviceName": self.device_name,
            "ObjectId": self.object_id,
            "RecoveryKeyId": self.recovery_key_id,
            "ExecutionDate": self.execution_date,
            "Status": str(self.status),
        }


@dataclass(frozen=True)
class RunPaths:
    csv_path: Path
    log_path: Path


@dataclass(frozen=True)
class RunSummary:
    """Per-status counts for a finished batch."""

    total: int = 0
    uploaded: int = 0
    not_found: int = 0
    failed: int = 0

    def __str__(self) -> str:
        return (
            f"{self.total} processed: {self.uploaded} uploaded, "
            f"{self.not_found} not found, {self.failed} failed"
        )


def make_device_identity(
    object_id: str, device_id: str | None, display_name: str | None = None
) -> DeviceIdentity:
    return DeviceIdentity(
        object_id=object_id or "",
        device_id=(device_id or "").strip(),
        display_name=(display_name or "").strip(),
    )


def make_outcome(
    status: OutcomeStatus,
    *,
    executed_at: datetime,
    object_id: str = "",
    device_name: str = "",
    recovery_key_id: str = "",
) -> OutcomeRecord:
    """Build an outcome record with the run's date format."""
    return OutcomeRecord(
        device_name=device_name,
        object_id=object_id,
        recovery_key_id=recovery_key_id,
        execution_date=executed_at.strftime("%Y-%m-%d %H:%M:%S"),
        status=status,
    )


def summarize(records: list[OutcomeRecord]) -> RunSummary:
    counts = {status: 0 for status in OutcomeStatus}
    for record in records:
        counts[record.status] += 1
    return RunSummary(
        total=len(records),
        uploaded=counts[OutcomeStatus.UPLOADED],
        not_found=counts[OutcomeStatus.NOT_FOUND],
        failed=counts[OutcomeStatus.FAILED],
    )
