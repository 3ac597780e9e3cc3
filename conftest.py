"""
Root-level shared test fixtures.

Collaborators (Graph, Key Vault) are replaced with MagicMocks; nothing here
touches the network or sleeps.
"""

from __future__ import annotations

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from keyescrow.config import EscrowConfig
from keyescrow.models import DeviceIdentity, RecoveryKeyInfo

FIXED_NOW = datetime(2026, 3, 9, 14, 5, 7)

# Shaped like a real 48-digit BitLocker recovery password
SAMPLE_KEY = "123456-234567-345678-456789-567890-678901-789012-890123"


@pytest.fixture
def clean_env(monkeypatch):
    """Remove env vars that leak between tests."""
    for key in [
        "KEYESCROW_TENANT_ID",
        "KEYESCROW_CLIENT_ID",
        "KEYESCROW_CLIENT_SECRET",
        "KEYESCROW_VAULT_NAME",
        "KEYESCROW_CONTENT_TYPE",
        "KEYESCROW_NAME_TEMPLATE",
        "KEYESCROW_INPUT",
        "KEYESCROW_OUTPUT_DIR",
        "KEYESCROW_CSV_NAME",
        "KEYESCROW_LOG_NAME",
        "KEYESCROW_GRAPH_URL",
        "KEYESCROW_HTTP_TIMEOUT",
        "KEYESCROW_LOG_ATTEMPTS",
        "KEYESCROW_LOG_BACKOFF",
        "AZURE_TENANT_ID",
        "AZURE_CLIENT_ID",
    ]:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def escrow_config(tmp_path) -> EscrowConfig:
    input_path = tmp_path / "devices.txt"
    return EscrowConfig(
        tenant_id="tenant-1",
        client_id="client-1",
        vault_name="kv-test",
        input_path=input_path,
        output_dir=tmp_path / "out",
        name_template="{deviceName}--{key}",
        log_backoff=0.0,
    )


@pytest.fixture
def devices():
    """object id -> DeviceIdentity for the fake directory."""
    return {
        "obj-1": DeviceIdentity(object_id="obj-1", device_id="dev-1", display_name="LAPTOP-01"),
        "obj-2": DeviceIdentity(object_id="obj-2", device_id="dev-2", display_name="LAPTOP-02"),
        "obj-3": DeviceIdentity(object_id="obj-3", device_id="dev-3", display_name="DESKTOP-03"),
    }


@pytest.fixture
def directory(devices):
    from keyescrow.errors import ResolutionError

    def resolve(object_id):
        if object_id not in devices:
            raise ResolutionError(object_id)
        return devices[object_id]

    mock = MagicMock()
    mock.resolve_device.side_effect = resolve
    return mock


@pytest.fixture
def key_source():
    mock = MagicMock()
    mock.list_recovery_keys.side_effect = lambda device_id: [
        RecoveryKeyInfo(key_id=f"key-{device_id}", created_at=datetime(2025, 1, 1)),
    ]
    mock.get_recovery_key_value.return_value = SAMPLE_KEY
    return mock


@pytest.fixture
def store():
    mock = MagicMock()
    mock.set_secret.return_value = "v1"
    return mock


@pytest.fixture
def sample_key():
    return SAMPLE_KEY
