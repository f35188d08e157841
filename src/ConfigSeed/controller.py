# === NAVMAP v1 ===
# {
#   "module": "ConfigSeed.controller",
#   "purpose": "Seeding state machine: initialization check, optional reset, and import",
#   "sections": [
#     {
#       "id": "seedstate",
#       "name": "SeedState",
#       "anchor": "class-seedstate",
#       "kind": "class"
#     },
#     {
#       "id": "seedoutcome",
#       "name": "SeedOutcome",
#       "anchor": "class-seedoutcome",
#       "kind": "class"
#     },
#     {
#       "id": "is-config-initialized",
#       "name": "is_config_initialized",
#       "anchor": "function-is-config-initialized",
#       "kind": "function"
#     },
#     {
#       "id": "remove-stored-config",
#       "name": "remove_stored_config",
#       "anchor": "function-remove-stored-config",
#       "kind": "function"
#     },
#     {
#       "id": "seed",
#       "name": "seed",
#       "anchor": "function-seed",
#       "kind": "function"
#     },
#     {
#       "id": "run",
#       "name": "run",
#       "anchor": "function-run",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Seeding controller.

A run moves through ``UNCHECKED`` to one of three paths:

- reset requested: ``RESET`` (delete the prefix subtree) then ``SEEDED``
- no key under the prefix: ``UNINITIALIZED`` then ``SEEDED``
- keys present: ``INITIALIZED``, a terminal no-op

Store query failures never count as "initialized": a failed listing is logged
and the store is treated as uninitialized, and a failed delete skips the reset
step but still imports. Parse and write failures from the importer are logged
and returned in the :class:`SeedOutcome` instead of being raised.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .connector import ClientFactory, connect
from .errors import ConfigSeedError, ParseError, QueryError, WriteError
from .importer import ImportReport, import_directory
from .settings import ResolvedConfig
from .store import StoreClient

__all__ = [
    "SeedState",
    "SeedOutcome",
    "is_config_initialized",
    "remove_stored_config",
    "seed",
    "run",
]

logger = logging.getLogger(__name__)


class SeedState(str, Enum):
    UNCHECKED = "unchecked"
    INITIALIZED = "initialized"
    UNINITIALIZED = "uninitialized"
    RESET = "reset"
    SEEDED = "seeded"


@dataclass
class SeedOutcome:
    """Final state of a seeding run and what the import produced."""

    state: SeedState
    report: Optional[ImportReport] = None
    error: Optional[ConfigSeedError] = None
    reset_failed: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and (self.report is None or self.report.ok)


def _subtree(config: ResolvedConfig) -> str:
    # Trailing slash keeps sibling namespaces such as "configuration/" out of scope.
    return config.global_prefix + "/"


def is_config_initialized(config: ResolvedConfig, client: StoreClient) -> bool:
    """Return ``True`` when at least one key exists under the global prefix."""

    try:
        keys = client.keys(_subtree(config))
    except QueryError as exc:
        logger.error("%s", exc)
        return False

    if keys:
        logger.info(
            "%s exists! The configuration data has been initialized.", config.global_prefix
        )
        return True
    logger.info(
        "%s doesn't exist! Start importing configuration data.", config.global_prefix
    )
    return False


def remove_stored_config(config: ResolvedConfig, client: StoreClient) -> bool:
    """Delete every key under the global prefix; return ``False`` if the delete failed."""

    try:
        client.delete_tree(_subtree(config))
    except QueryError as exc:
        logger.error("%s", exc)
        return False
    logger.info('All values under the globalPrefix("%s") is removed.', config.global_prefix)
    return True


def _import(config: ResolvedConfig, client: StoreClient, outcome: SeedOutcome) -> SeedOutcome:
    report = ImportReport()
    outcome.report = report
    try:
        import_directory(config, client, report=report)
    except (ParseError, WriteError) as exc:
        logger.error("%s", exc)
        outcome.error = exc
        return outcome
    outcome.state = SeedState.SEEDED
    return outcome


def seed(config: ResolvedConfig, client: StoreClient) -> SeedOutcome:
    """Run the seeding state machine against an already connected store."""

    if config.is_reset:
        outcome = SeedOutcome(state=SeedState.RESET)
        outcome.reset_failed = not remove_stored_config(config, client)
        return _import(config, client, outcome)

    if is_config_initialized(config, client):
        return SeedOutcome(state=SeedState.INITIALIZED)
    return _import(config, client, SeedOutcome(state=SeedState.UNINITIALIZED))


def run(
    config: ResolvedConfig,
    *,
    client_factory: Optional[ClientFactory] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> SeedOutcome:
    """Connect to the store and seed it.

    Raises:
        ConnectionExhausted: If the health check never succeeded.
    """

    client = connect(config, client_factory=client_factory, sleep=sleep)
    try:
        return seed(config, client)
    finally:
        close = getattr(client, "close", None)
        if callable(close):
            close()
