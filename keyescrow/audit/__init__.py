"""Append-only run log."""

from keyescrow.audit.log import AuditLog

__all__ = ["AuditLog"]
