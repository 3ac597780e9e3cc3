"""
Run configuration for keyescrow.

Configuration is loaded from environment variables with sensible defaults,
then overridden by CLI flags. The resulting EscrowConfig is immutable and is
passed explicitly to the runner and orchestrator.

Usage:
    from keyescrow.config import EscrowConfig

    cfg = EscrowConfig.from_env()
    cfg = dataclasses.replace(cfg, vault_name="kv-escrow")
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from keyescrow.errors import ConfigError
from keyescrow.naming import DEFAULT_TEMPLATE

GRAPH_URL = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"
DEFAULT_CONTENT_TYPE = "BitLockerRecoveryKey"


@dataclass(frozen=True)
class EscrowConfig:
    """Everything one escrow run needs to know."""

    # Identity
    tenant_id: str = ""
    client_id: str = ""
    client_secret: str = ""

    # Secret store
    vault_name: str = ""
    content_type: str = DEFAULT_CONTENT_TYPE
    name_template: str = DEFAULT_TEMPLATE

    # Files
    input_path: Path = field(default_factory=lambda: Path("devices.txt"))
    output_dir: Path = field(default_factory=Path.cwd)
    csv_base_name: str = "BitLockerEscrow.csv"
    log_base_name: str = "BitLockerEscrow"

    # Graph
    graph_url: str = GRAPH_URL
    http_timeout: float = 30.0

    # Audit log retry
    log_attempts: int = 5
    log_backoff: float = 0.15

    @classmethod
    def from_env(cls) -> EscrowConfig:
        return cls(
            tenant_id=os.environ.get("KEYESCROW_TENANT_ID", "")
            or os.environ.get("AZURE_TENANT_ID", ""),
            client_id=os.environ.get("KEYESCROW_CLIENT_ID", "")
            or os.environ.get("AZURE_CLIENT_ID", ""),
            client_secret=os.environ.get("KEYESCROW_CLIENT_SECRET", ""),
            vault_name=os.environ.get("KEYESCROW_VAULT_NAME", ""),
            content_type=os.environ.get("KEYESCROW_CONTENT_TYPE", DEFAULT_CONTENT_TYPE),
            name_template=os.environ.get("KEYESCROW_NAME_TEMPLATE", DEFAULT_TEMPLATE),
            input_path=Path(os.environ.get("KEYESCROW_INPUT", "devices.txt")),
            output_dir=Path(os.environ.get("KEYESCROW_OUTPUT_DIR", Path.cwd())),
            csv_base_name=os.environ.get("KEYESCROW_CSV_NAME", "BitLockerEscrow.csv"),
            log_base_name=os.environ.get("KEYESCROW_LOG_NAME", "BitLockerEscrow"),
            graph_url=os.environ.get("KEYESCROW_GRAPH_URL", GRAPH_URL),
            http_timeout=float(os.environ.get("KEYESCROW_HTTP_TIMEOUT", "30")),
            log_attempts=int(os.environ.get("KEYESCROW_LOG_ATTEMPTS", "5")),
            log_backoff=float(os.environ.get("KEYESCROW_LOG_BACKOFF", "0.15")),
        )

    def validate(self) -> None:
        """Raise ConfigError for settings a run cannot start without."""
        if not self.vault_name:
            raise ConfigError("No Key Vault configured (set KEYESCROW_VAULT_NAME or --vault)")
        if self.log_attempts < 1:
            raise ConfigError("KEYESCROW_LOG_ATTEMPTS must be at least 1")
