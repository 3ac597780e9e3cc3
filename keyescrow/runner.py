"""
Run driver: sequences one escrow run end to end.

    1. allocate this run's CSV and log paths
    2. read the identifier list (fatal if missing or empty)
    3. open the Graph and Key Vault sessions
    4. process every identifier
    5. write the CSV once, at the very end

A fatal error at any step propagates and the CSV is not written; progress up
to that point is only visible in the log.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from keyescrow import __version__
from keyescrow.audit.log import AuditLog
from keyescrow.config import EscrowConfig
from keyescrow.escrow import DeviceDirectory, EscrowOrchestrator, RecoveryKeySource, SecretStore
from keyescrow.inputs import read_identifiers
from keyescrow.models import OutcomeRecord, RunPaths, RunSummary, summarize
from keyescrow.paths import compute_run_paths
from keyescrow.report import write_report

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Collaborators:
    directory: DeviceDirectory
    keys: RecoveryKeySource
    store: SecretStore


@dataclass(frozen=True)
class RunResult:
    paths: RunPaths
    records: list[OutcomeRecord]
    summary: RunSummary


def open_collaborators(config: EscrowConfig) -> Collaborators:
    """Sign in and build the Graph and Key Vault clients."""
    from keyescrow.auth import build_credential, graph_token_provider
    from keyescrow.graph import GraphClient
    from keyescrow.vault import KeyVaultStore

    credential = build_credential(config)
    graph = GraphClient(
        graph_token_provider(credential),
        base_url=config.graph_url,
        timeout=config.http_timeout,
    )
    return Collaborators(directory=graph, keys=graph, store=KeyVaultStore(credential))


def close_collaborators(collaborators: Collaborators) -> None:
    # The Graph client serves as both directory and key source; close it once
    parts = (collaborators.directory, collaborators.keys, collaborators.store)
    for part in {id(p): p for p in parts}.values():
        close = getattr(part, "close", None)
        if close is not None:
            close()


def run(
    config: EscrowConfig,
    connect: Callable[[EscrowConfig], Collaborators] = open_collaborators,
    *,
    clock: Callable[[], datetime] = datetime.now,
    audit_factory: Callable[[RunPaths], AuditLog] | None = None,
) -> RunResult:
    """Execute one escrow run. Raises the fatal errors of keyescrow.errors."""
    config.validate()
    started = clock()
    paths = compute_run_paths(config.output_dir, config.csv_base_name, config.log_base_name, started)
    if audit_factory is None:
        audit = AuditLog(
            paths.log_path,
            attempts=config.log_attempts,
            backoff=config.log_backoff,
            clock=clock,
        )
    else:
        audit = audit_factory(paths)

    audit.append(f"keyescrow {__version__} starting, vault {config.vault_name}")
    audit.append(f"Reading identifiers from {config.input_path}")
    identifiers = read_identifiers(config.input_path)
    audit.append(f"{len(identifiers)} identifier(s) to process")

    collaborators = connect(config)
    try:
        orchestrator = EscrowOrchestrator(
            config,
            collaborators.directory,
            collaborators.keys,
            collaborators.store,
            audit,
            clock=clock,
        )
        records = orchestrator.process(identifiers)
    finally:
        close_collaborators(collaborators)

    summary = summarize(records)
    audit.append(f"Run complete: {summary}")
    write_report(paths.csv_path, records)
    audit.append(f"Results written to {paths.csv_path}")
    return RunResult(paths=paths, records=records, summary=summary)
