"""
Credential and session setup.

Picks an azure-identity credential from the run configuration:
  - client secret configured   -> ClientSecretCredential (unattended runs)
  - tenant or client id given  -> InteractiveBrowserCredential (operator sign-in)
  - neither                    -> DefaultAzureCredential (env, managed identity, CLI login)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from azure.identity import (
    ClientSecretCredential,
    DefaultAzureCredential,
    InteractiveBrowserCredential,
)

from keyescrow.config import GRAPH_SCOPE, EscrowConfig
from keyescrow.errors import ConfigError

logger = logging.getLogger(__name__)


def build_credential(config: EscrowConfig) -> Any:
    if config.client_secret:
        if not (config.tenant_id and config.client_id):
            raise ConfigError("A client secret needs both a tenant id and a client id")
        logger.info("Using client secret credential for app %s", config.client_id)
        return ClientSecretCredential(config.tenant_id, config.client_id, config.client_secret)
    if config.tenant_id or config.client_id:
        logger.info("Using interactive browser sign-in")
        kwargs = {}
        if config.tenant_id:
            kwargs["tenant_id"] = config.tenant_id
        if config.client_id:
            kwargs["client_id"] = config.client_id
        return InteractiveBrowserCredential(**kwargs)
    logger.info("Using DefaultAzureCredential")
    return DefaultAzureCredential()


def graph_token_provider(credential: Any, scope: str = GRAPH_SCOPE) -> Callable[[], str]:
    """Bearer token callable for GraphClient. azure-identity caches and refreshes tokens."""

    def provider() -> str:
        return str(credential.get_token(scope).token)

    return provider
