"""
Escrow orchestration: one pass over a list of device object ids.

Each identifier ends in exactly one outcome:

    resolve fails                       -> Failed
    resolved, no recovery key listed    -> NotFound
    key fetched and stored              -> Uploaded
    any other error after resolution    -> Failed

A failure on one device never stops the batch. The only exception that
escapes is LogWriteError: without the audit log the run cannot continue.

The recovery key value is used for exactly two things, building the real
secret name and the store write. Logs only ever see the masked name.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Protocol

from keyescrow.audit.log import AuditLog
from keyescrow.config import EscrowConfig
from keyescrow.errors import DataError, LogWriteError
from keyescrow.models import (
    DeviceIdentity,
    OutcomeRecord,
    OutcomeStatus,
    RecoveryKeyInfo,
    RecoveryKeyRecord,
    make_outcome,
)
from keyescrow.naming import MASKED_KEY, format_secret_name, masked_secret_name

logger = logging.getLogger(__name__)

KEY_RETRIEVED = "Recovery key retrieved"


class DeviceDirectory(Protocol):
    def resolve_device(self, object_id: str) -> DeviceIdentity: ...


class RecoveryKeySource(Protocol):
    def list_recovery_keys(self, device_id: str) -> list[RecoveryKeyInfo]: ...

    def get_recovery_key_value(self, key_id: str) -> str: ...


class SecretStore(Protocol):
    def set_secret(
        self,
        vault_name: str,
        secret_name: str,
        secret_value: str,
        content_type: str,
        *,
        tags: dict[str, str] | None = None,
    ) -> str | None: ...


def select_newest_key(keys: Iterable[RecoveryKeyInfo]) -> RecoveryKeyInfo | None:
    """Pick the key with the latest created_at.

    On identical timestamps the one listed last wins. Keys without a
    timestamp rank below any dated key.
    """
    newest = None
    for key in keys:
        if newest is None or _age_rank(key) >= _age_rank(newest):
            newest = key
    return newest


def _age_rank(key: RecoveryKeyInfo) -> tuple[bool, float]:
    if key.created_at is None:
        return (False, 0.0)
    return (True, key.created_at.timestamp())


def fetch_recovery_key(source: RecoveryKeySource, info: RecoveryKeyInfo) -> RecoveryKeyRecord:
    """Fetch the value for one listed key. Raises DataError when none comes back."""
    value = source.get_recovery_key_value(info.key_id)
    if not value:
        raise DataError(f"Recovery key {info.key_id} has no value")
    return RecoveryKeyRecord(key_id=info.key_id, created_at=info.created_at, key_value=value)


def scrub(message: str, *secrets: str) -> str:
    """Replace every occurrence of the given secrets with the mask."""
    for secret in sorted((s for s in secrets if s), key=len, reverse=True):
        message = message.replace(secret, MASKED_KEY)
    return message


class EscrowOrchestrator:
    """Drives resolve -> list -> fetch -> store for each identifier."""

    def __init__(
        self,
        config: EscrowConfig,
        directory: DeviceDirectory,
        keys: RecoveryKeySource,
        store: SecretStore,
        audit: AuditLog,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config
        self._directory = directory
        self._keys = keys
        self._store = store
        self._audit = audit
        self._clock = clock

    def process(self, identifiers: list[str]) -> list[OutcomeRecord]:
        """Process every identifier in order; one record per identifier."""
        records: list[OutcomeRecord] = []
        total = len(identifiers)
        for index, object_id in enumerate(identifiers, start=1):
            self._audit.append(f"[{index}/{total}] Processing {object_id}")
            records.append(self.process_one(object_id))
        return records

    def process_one(self, object_id: str) -> OutcomeRecord:
        executed_at = self._clock()

        try:
            device = self._directory.resolve_device(object_id)
        except LogWriteError:
            raise
        except Exception as e:
            self._audit.append(f"FAILED {object_id}: {e}")
            return make_outcome(OutcomeStatus.FAILED, executed_at=executed_at, object_id=object_id)

        name = device.name
        logger.debug("Resolved %s -> deviceId %r (%s)", object_id, device.device_id, name)
        key_id = ""
        key_value = ""
        secret_name = ""
        try:
            if not device.device_id:
                raise DataError(f"Device {device.object_id} has no deviceId")

            newest = select_newest_key(self._keys.list_recovery_keys(device.device_id))
            if newest is None:
                self._audit.append(f"NOT FOUND {name}: no recovery key on record")
                return make_outcome(
                    OutcomeStatus.NOT_FOUND,
                    executed_at=executed_at,
                    object_id=device.object_id,
                    device_name=name,
                )
            key_id = newest.key_id

            recovery_key = fetch_recovery_key(self._keys, newest)
            key_value = recovery_key.key_value
            self._audit.append(KEY_RETRIEVED)

            template = self.config.name_template
            secret_name = format_secret_name(
                template, device.object_id, device.device_id, name, key_value
            )
            display_name = masked_secret_name(template, device.object_id, device.device_id, name)

            self._audit.append(f"Uploading {display_name} to vault {self.config.vault_name}")
            self._store.set_secret(
                self.config.vault_name,
                secret_name,
                key_value,
                self.config.content_type,
                tags={
                    "objectId": device.object_id,
                    "deviceId": device.device_id,
                    "recoveryKeyId": key_id,
                },
            )
            self._audit.append(f"UPLOADED {name} as {display_name}")
            return make_outcome(
                OutcomeStatus.UPLOADED,
                executed_at=executed_at,
                object_id=device.object_id,
                device_name=name,
                recovery_key_id=key_id,
            )
        except LogWriteError:
            raise
        except Exception as e:
            reason = scrub(f"{type(e).__name__}: {e}", secret_name, key_value)
            self._audit.append(f"FAILED {name}: {reason}")
            return make_outcome(
                OutcomeStatus.FAILED,
                executed_at=executed_at,
                object_id=device.object_id,
                device_name=name,
                recovery_key_id=key_id,
            )
