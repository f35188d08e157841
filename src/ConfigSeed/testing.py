# === NAVMAP v1 ===
# {
#   "module": "ConfigSeed.testing",
#   "purpose": "In-memory store client used by tests and CLI dry runs",
#   "sections": [
#     {
#       "id": "inmemorystoreclient",
#       "name": "InMemoryStoreClient",
#       "anchor": "class-inmemorystoreclient",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""In-memory StoreClient used by the test-suite and by dry runs of the CLI.

The fake mirrors the semantics of the Consul key/value API closely enough for
the seeder: keys are listed by prefix, ``delete_tree`` removes a prefix
subtree, and failures can be injected per operation to exercise the
controller's degradation paths.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

import httpx

from .errors import QueryError, WriteError
from .store import CONSUL_STATUS_PATH

__all__ = ["InMemoryStoreClient"]


@dataclass
class InMemoryStoreClient:
    """Dictionary-backed implementation of :class:`ConfigSeed.store.StoreClient`.

    Attributes:
        data: Stored key/value pairs.
        writes: Keys in the order they were written.
        health_status: Status code returned by :meth:`health_check`.
        fail_keys: Query errors are raised by :meth:`keys` when set.
        fail_delete: Query errors are raised by :meth:`delete_tree` when set.
        fail_put_on: Keys whose write raises :class:`WriteError`.
        health_checks: Number of health checks issued.
    """

    data: Dict[str, bytes] = field(default_factory=dict)
    writes: List[str] = field(default_factory=list)
    health_status: int = 200
    fail_keys: bool = False
    fail_delete: bool = False
    fail_put_on: Set[str] = field(default_factory=set)
    health_checks: int = 0
    on_put: Optional[Callable[[str, bytes], None]] = None

    def health_check(self) -> httpx.Response:
        self.health_checks += 1
        request = httpx.Request("GET", "memory://store" + CONSUL_STATUS_PATH)
        return httpx.Response(self.health_status, request=request)

    def keys(self, prefix: str) -> List[str]:
        if self.fail_keys:
            raise QueryError(f"Listing keys under '{prefix}' failed: injected failure")
        return sorted(key for key in self.data if key.startswith(prefix))

    def put(self, key: str, value: bytes) -> None:
        if key in self.fail_put_on:
            raise WriteError(f"Writing key '{key}' failed: injected failure", key=key)
        self.data[key] = value
        self.writes.append(key)
        if self.on_put is not None:
            self.on_put(key, value)

    def delete_tree(self, prefix: str) -> None:
        if self.fail_delete:
            raise QueryError(f"Deleting keys under '{prefix}' failed: injected failure")
        for key in [key for key in self.data if key.startswith(prefix)]:
            del self.data[key]

    def decoded(self) -> Dict[str, str]:
        """Return stored values decoded as UTF-8 text."""

        return {key: value.decode("utf-8") for key, value in self.data.items()}
