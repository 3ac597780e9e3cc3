"""
Output path allocation.

Repeated runs on the same day must never overwrite an earlier run's CSV or
log, so every output path is probed and suffixed ``-Update``, ``-Update1``,
``-Update2``... until a free name is found.
"""

from __future__ import annotations

import itertools
import logging
from datetime import datetime
from pathlib import Path

from keyescrow.models import RunPaths

logger = logging.getLogger(__name__)

UPDATE_SUFFIX = "-Update"
CSV_DATE_FORMAT = "%m-%d"
LOG_DATE_FORMAT = "%m-%d-%y"


def _candidates(desired: Path):
    yield desired
    yield desired.with_name(f"{desired.stem}{UPDATE_SUFFIX}{desired.suffix}")
    for n in itertools.count(1):
        yield desired.with_name(f"{desired.stem}{UPDATE_SUFFIX}{n}{desired.suffix}")


def allocate_unique_path(desired: Path | str) -> Path:
    """Return ``desired`` or the first ``-Update[N]`` variant that does not exist."""
    desired = Path(desired)
    path = next(c for c in _candidates(desired) if not c.exists())
    if path != desired:
        logger.debug("%s exists, using %s", desired, path)
    return path


def dated_path(directory: Path, base_name: str, date_format: str, now: datetime, extension: str | None = None) -> Path:
    """``directory/<stem>_<date><ext>``; ``extension`` overrides the base name's suffix."""
    base = Path(base_name)
    suffix = extension if extension is not None else base.suffix
    return Path(directory) / f"{base.stem}_{now.strftime(date_format)}{suffix}"


def compute_run_paths(output_dir: Path, csv_base: str, log_base: str, now: datetime) -> RunPaths:
    """Allocate this run's CSV (``_MM-DD``) and log (``_MM-DD-YY.log``) paths."""
    csv_path = allocate_unique_path(dated_path(output_dir, csv_base, CSV_DATE_FORMAT, now))
    log_path = allocate_unique_path(dated_path(output_dir, log_base, LOG_DATE_FORMAT, now, ".log"))
    return RunPaths(csv_path=csv_path, log_path=log_path)
