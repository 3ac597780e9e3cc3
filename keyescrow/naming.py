"""
Secret name construction for Key Vault.

Key Vault secret names allow only ASCII letters, digits and hyphens, up to
127 characters. Names are built from a template such as
``"{deviceName}--{key}"``: placeholders are substituted in a fixed order, the
result is normalized to the legal charset, and when it is too long the part
left of the last ``--`` is shortened so the key-derived suffix survives.

Usage:
    from keyescrow.naming import format_secret_name, sanitize

    name = format_secret_name("{deviceName}--{key}", object_id, device_id, "LAPTOP-01", key)
"""

from __future__ import annotations

import re

MAX_SECRET_NAME_LENGTH = 127
SEPARATOR = "--"
FALLBACK_NAME = "unnamed"
MASKED_KEY = "MASKED"
DEFAULT_TEMPLATE = "{deviceName}-{shortId}--{key}"

_ILLEGAL = re.compile(r"[^0-9A-Za-z-]")


def short_id(identifier: str) -> str:
    return identifier[:8]


def _normalize(candidate: str) -> str:
    """Replace illegal characters and strip edge hyphens. No length cap."""
    return _ILLEGAL.sub("-", candidate or "").strip("-")


def sanitize(candidate: str | None, limit: int = MAX_SECRET_NAME_LENGTH) -> str:
    """Turn any string into a legal secret name of at most ``limit`` characters.

    Idempotent: sanitize(sanitize(x)) == sanitize(x).
    """
    name = _normalize(candidate or "")[:limit].strip("-")
    return name or FALLBACK_NAME


def build_replacements(
    object_id: str, device_id: str, device_name: str, key: str
) -> list[tuple[str, str]]:
    """Ordered (token, value) pairs applied to a name template."""
    return [
        ("{id}", object_id),
        ("{shortId}", short_id(object_id)),
        ("{deviceId}", device_id),
        ("{deviceName}", device_name),
        ("{key}", key),
    ]


def substitute(template: str, replacements: list[tuple[str, str]]) -> str:
    result = template
    for token, value in replacements:
        result = result.replace(token, value or "")
    return result


def truncate_preserving_suffix(name: str, limit: int = MAX_SECRET_NAME_LENGTH) -> str:
    """Shorten ``name`` to ``limit`` keeping the text after the last separator.

    Only the left side is cut. If the right side alone cannot fit, the left is
    kept to a single character and the final cap cuts into the right side.
    Without a separator the name is cut flat.
    """
    if len(name) <= limit:
        return name
    left, sep, right = name.rpartition(SEPARATOR)
    if not sep:
        return sanitize(name[:limit], limit)
    max_left = max(1, limit - len(SEPARATOR) - len(right))
    return sanitize(f"{left[:max_left]}{SEPARATOR}{right}", limit)


def format_secret_name(
    template: str,
    object_id: str,
    device_id: str,
    device_name: str,
    key: str,
    limit: int = MAX_SECRET_NAME_LENGTH,
) -> str:
    """Render ``template`` into a legal, length-capped secret name. Never raises."""
    raw = substitute(template, build_replacements(object_id, device_id, device_name, key))
    name = _normalize(raw)
    if len(name) > limit:
        name = truncate_preserving_suffix(name, limit)
    return sanitize(name, limit)


def masked_secret_name(
    template: str,
    object_id: str,
    device_id: str,
    device_name: str,
    limit: int = MAX_SECRET_NAME_LENGTH,
) -> str:
    """Display-safe variant of format_secret_name with the key replaced by a placeholder."""
    return format_secret_name(template, object_id, device_id, device_name, MASKED_KEY, limit)
