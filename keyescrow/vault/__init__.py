"""Secret store backed by Azure Key Vault."""

from keyescrow.vault.store import KeyVaultStore

__all__ = ["KeyVaultStore"]
