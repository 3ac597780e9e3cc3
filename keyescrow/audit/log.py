"""
Append-only audit log for an escrow run.

Each call appends one ``[HH:MM:SS] message`` line and closes the file before
returning, so a crash never loses a line that was already reported written.
The file is opened in plain append mode: another process may tail it or
append to it at the same time. Transient open/write failures are retried
with linear backoff; exhausting the retries raises LogWriteError, which ends
the run because the log is the audit trail.

Usage:
    from keyescrow.audit.log import AuditLog

    audit = AuditLog(run_paths.log_path)
    audit.append("Starting escrow run")
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from keyescrow.errors import LogWriteError
from keyescrow.retry import bounded_retry, linear_backoff

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 5
DEFAULT_BACKOFF = 0.15


def format_line(message: str | None, now: datetime) -> str:
    """One timestamped line; embedded line breaks are folded into spaces."""
    text = " ".join(str(message or "").splitlines()) or " "
    return f"[{now.strftime('%H:%M:%S')}] {text}\n"


class AuditLog:
    """Timestamped, retrying, append-only line writer."""

    def __init__(
        self,
        path: Path | str,
        *,
        attempts: int = DEFAULT_ATTEMPTS,
        backoff: float = DEFAULT_BACKOFF,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.path = Path(path)
        self.attempts = attempts
        self.backoff = backoff
        self._clock = clock
        self._sleep = sleep

    def _write(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line)
            f.flush()
            os.fsync(f.fileno())

    def append(self, message: str | None) -> None:
        """Append one line. Raises LogWriteError once all attempts fail."""
        line = format_line(message, self._clock())
        try:
            bounded_retry(
                lambda: self._write(line),
                attempts=self.attempts,
                wait=linear_backoff(self.backoff),
                retry_on=OSError,
                sleep=self._sleep,
            )
        except OSError as e:
            raise LogWriteError(self.path, e) from e
        logger.info("%s", (message or "").strip())
