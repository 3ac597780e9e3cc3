"""Microsoft Graph access for devices and BitLocker recovery keys."""

from keyescrow.graph.client import GraphClient

__all__ = ["GraphClient"]
