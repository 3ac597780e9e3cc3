"""
Azure Key Vault secret store.

Wraps azure.keyvault.secrets.SecretClient. One client is created per vault
and reused for the rest of the run. Store failures are raised as StoreError
with a message built from the HTTP status only, so neither the secret name
nor the value can leak through an exception message.
"""

from __future__ import annotations

import logging
from typing import Any

from azure.core.exceptions import AzureError, HttpResponseError
from azure.keyvault.secrets import SecretClient

from keyescrow.errors import StoreError

logger = logging.getLogger(__name__)


def vault_url(vault_name: str) -> str:
    return f"https://{vault_name}.vault.azure.net/"


class KeyVaultStore:
    """Write-only view of one or more Key Vaults."""

    def __init__(self, credential: Any, client_factory=SecretClient) -> None:
        self._credential = credential
        self._client_factory = client_factory
        self._clients: dict[str, Any] = {}

    def _client(self, vault_name: str) -> Any:
        client = self._clients.get(vault_name)
        if client is None:
            client = self._client_factory(vault_url=vault_url(vault_name), credential=self._credential)
            self._clients[vault_name] = client
        return client

    def set_secret(
        self,
        vault_name: str,
        secret_name: str,
        secret_value: str,
        content_type: str,
        *,
        tags: dict[str, str] | None = None,
    ) -> str | None:
        """Store a secret value. Returns the new version id. Raises StoreError."""
        try:
            secret = self._client(vault_name).set_secret(
                secret_name, secret_value, content_type=content_type, tags=tags
            )
        except HttpResponseError as e:
            raise StoreError(
                f"Key Vault '{vault_name}' rejected the write (HTTP {e.status_code} {e.reason})"
            ) from None
        except AzureError as e:
            raise StoreError(
                f"Key Vault '{vault_name}' write failed: {type(e).__name__}"
            ) from None
        version = getattr(getattr(secret, "properties", None), "version", None)
        logger.debug("Secret stored in %s (version %s)", vault_name, version)
        return version

    def close(self) -> None:
        for client in self._clients.values():
            client.close()
        self._clients.clear()
