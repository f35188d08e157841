# === NAVMAP v1 ===
# {
#   "module": "ConfigSeed.store",
#   "purpose": "StoreClient protocol and the HTTPX-backed Consul key/value client",
#   "sections": [
#     {
#       "id": "storeclient",
#       "name": "StoreClient",
#       "anchor": "class-storeclient",
#       "kind": "class"
#     },
#     {
#       "id": "consulstoreclient",
#       "name": "ConsulStoreClient",
#       "anchor": "class-consulstoreclient",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""StoreClient protocol and the HTTPX-backed Consul key/value client.

The seeder needs four operations from the store: a health check, a listing
of keys under a prefix, a single-key write, and a recursive delete. They are
expressed as the :class:`StoreClient` protocol so the controller and importer
can run against the real Consul agent or the in-memory fake in
:mod:`ConfigSeed.testing`.

Example:
    >>> client = ConsulStoreClient("http://localhost:8500")
    >>> client.put("config/app/port", b"8080")  # doctest: +SKIP
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, runtime_checkable
from urllib.parse import quote

import httpx

from .errors import QueryError, WriteError

__all__ = [
    "CONSUL_STATUS_PATH",
    "CONSUL_KV_PATH",
    "StoreClient",
    "ConsulStoreClient",
]

logger = logging.getLogger(__name__)

CONSUL_STATUS_PATH = "/v1/agent/self"
CONSUL_KV_PATH = "/v1/kv/"


@runtime_checkable
class StoreClient(Protocol):
    """Operations the seeder consumes from a key/value store."""

    def health_check(self) -> httpx.Response:
        """Issue a single health-check request and return the raw response."""

    def keys(self, prefix: str) -> List[str]:
        """Return every key that starts with ``prefix``."""

    def put(self, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``."""

    def delete_tree(self, prefix: str) -> None:
        """Remove every key under ``prefix``."""


def _kv_path(key: str) -> str:
    return CONSUL_KV_PATH + quote(key, safe="/")


class ConsulStoreClient:
    """Consul HTTP API v1 client bound to a single agent base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        headers = {"X-Consul-Token": token} if token else {}
        self.base_url = base_url
        self._client = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "ConsulStoreClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def health_check(self) -> httpx.Response:
        return self._client.get(CONSUL_STATUS_PATH)

    def keys(self, prefix: str) -> List[str]:
        try:
            response = self._client.get(_kv_path(prefix), params={"keys": ""})
        except httpx.HTTPError as exc:
            raise QueryError(f"Listing keys under '{prefix}' failed: {exc}") from exc
        # Consul answers 404 when nothing exists under the prefix.
        if response.status_code == 404:
            return []
        if response.is_error:
            raise QueryError(
                f"Listing keys under '{prefix}' failed: HTTP {response.status_code}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise QueryError(f"Listing keys under '{prefix}' returned invalid JSON") from exc
        if not isinstance(payload, list):
            raise QueryError(f"Listing keys under '{prefix}' returned {type(payload).__name__}")
        return [str(item) for item in payload]

    def put(self, key: str, value: bytes) -> None:
        try:
            response = self._client.put(_kv_path(key), content=value)
        except httpx.HTTPError as exc:
            raise WriteError(f"Writing key '{key}' failed: {exc}", key=key) from exc
        if response.is_error:
            raise WriteError(
                f"Writing key '{key}' failed: HTTP {response.status_code}", key=key
            )

    def delete_tree(self, prefix: str) -> None:
        try:
            response = self._client.delete(_kv_path(prefix), params={"recurse": ""})
        except httpx.HTTPError as exc:
            raise QueryError(f"Deleting keys under '{prefix}' failed: {exc}") from exc
        if response.is_error:
            raise QueryError(
                f"Deleting keys under '{prefix}' failed: HTTP {response.status_code}"
            )
