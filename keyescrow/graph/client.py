"""
Microsoft Graph client for device lookup and BitLocker recovery keys.

Wraps a synchronous httpx.Client. Key metadata and key values are fetched by
separate calls: the listing endpoint never returns values, and each value is
requested individually by key id.

Usage:
    from keyescrow.graph import GraphClient

    with GraphClient(token_provider) as graph:
        device = graph.resolve_device(object_id)
        keys = graph.list_recovery_keys(device.device_id)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx

from keyescrow import __version__
from keyescrow.config import GRAPH_URL
from keyescrow.errors import DataError, ResolutionError
from keyescrow.models import DeviceIdentity, RecoveryKeyInfo, make_device_identity

logger = logging.getLogger(__name__)

# The BitLocker endpoints reject requests without a client name/version
CLIENT_HEADERS = {
    "ocp-client-name": "keyescrow",
    "ocp-client-version": __version__,
}


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable createdDateTime: %s", value)
        return None


class GraphClient:
    """Sync client for the Graph device and BitLocker endpoints."""

    def __init__(
        self,
        token_provider: Callable[[], str],
        base_url: str = GRAPH_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._token_provider = token_provider
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers=CLIENT_HEADERS,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GraphClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        resp = self._client.get(
            url,
            params=params,
            headers={"Authorization": f"Bearer {self._token_provider()}"},
        )
        resp.raise_for_status()
        return dict(resp.json())

    def resolve_device(self, object_id: str) -> DeviceIdentity:
        """GET /devices/{id}. Raises ResolutionError when the device is unknown."""
        try:
            data = self._get(
                f"/devices/{object_id}",
                params={"$select": "id,deviceId,displayName"},
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (400, 404):
                raise ResolutionError(object_id) from e
            raise ResolutionError(object_id, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ResolutionError(object_id, str(e)) from e
        return make_device_identity(
            data.get("id") or object_id, data.get("deviceId"), data.get("displayName")
        )

    def _get_key_data(self, what: str, url: str, params: dict[str, str] | None) -> dict[str, Any]:
        try:
            return self._get(url, params=params)
        except httpx.HTTPStatusError as e:
            raise DataError(f"{what} failed: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise DataError(f"{what} failed: {type(e).__name__}") from e

    def list_recovery_keys(self, device_id: str) -> list[RecoveryKeyInfo]:
        """List key metadata for a device, following @odata.nextLink pages.

        Raises DataError when Graph refuses or cannot be reached.
        """
        keys: list[RecoveryKeyInfo] = []
        url: str | None = "/informationProtection/bitlocker/recoveryKeys"
        params: dict[str, str] | None = {"$filter": f"deviceId eq '{device_id}'"}
        while url:
            page = self._get_key_data(f"Listing recovery keys for {device_id}", url, params)
            for item in page.get("value", []):
                keys.append(
                    RecoveryKeyInfo(
                        key_id=item.get("id", ""),
                        created_at=parse_timestamp(item.get("createdDateTime")),
                    )
                )
            url = page.get("@odata.nextLink")
            params = None  # nextLink already carries the query
        logger.debug("Device %s has %d recovery key(s)", device_id, len(keys))
        return keys

    def get_recovery_key_value(self, key_id: str) -> str:
        """GET a single key with $select=key. Returns "" when no value comes back."""
        data = self._get_key_data(
            f"Fetching recovery key {key_id}",
            f"/informationProtection/bitlocker/recoveryKeys/{key_id}",
            {"$select": "key"},
        )
        return str(data.get("key") or "")
