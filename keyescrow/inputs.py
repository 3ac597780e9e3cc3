"""Identifier list parsing."""

from __future__ import annotations

from pathlib import Path

from keyescrow.errors import InputError


def parse_identifiers(text: str) -> list[str]:
    """One identifier per line; blank lines and ``#`` comments are dropped."""
    identifiers = []
    for line in text.lstrip("\ufeff").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        identifiers.append(line)
    return identifiers


def read_identifiers(path: Path | str) -> list[str]:
    """Read the identifier list. Raises InputError if missing or empty."""
    path = Path(path)
    if not path.is_file():
        raise InputError(path, "file not found")
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(path, str(e)) from e
    identifiers = parse_identifiers(text)
    if not identifiers:
        raise InputError(path, "no identifiers found")
    return identifiers
