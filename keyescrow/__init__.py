"""keyescrow: escrow BitLocker recovery keys into Azure Key Vault."""

__version__ = "0.1.0"
