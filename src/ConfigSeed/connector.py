# === NAVMAP v1 ===
# {
#   "module": "ConfigSeed.connector",
#   "purpose": "Health-checked store connection with a bounded Tenacity retry policy",
#   "sections": [
#     {
#       "id": "store-url",
#       "name": "store_url",
#       "anchor": "function-store-url",
#       "kind": "function"
#     },
#     {
#       "id": "create-health-check-policy",
#       "name": "create_health_check_policy",
#       "anchor": "function-create-health-check-policy",
#       "kind": "function"
#     },
#     {
#       "id": "connect",
#       "name": "connect",
#       "anchor": "function-connect",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Store connector: health-checked Consul connection with bounded retry.

Before any read or write traffic is sent, the connector probes the agent's
status endpoint up to ``fail_limit`` times. A transport error or a non-2xx
response counts as a failed attempt and is followed by a fixed
``fail_wait_time`` pause; the first 2xx response ends the loop. Retrying is
driven by a Tenacity policy:

- **Stop**: after exactly ``fail_limit`` attempts (none at all when it is 0)
- **Wait**: fixed ``fail_wait_time`` seconds between attempts
- **Retry on**: ``httpx.HTTPError`` or any non-2xx status
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import httpx
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from .errors import ConnectionExhausted
from .settings import ResolvedConfig
from .store import CONSUL_STATUS_PATH, ConsulStoreClient, StoreClient

__all__ = ["ClientFactory", "store_url", "create_health_check_policy", "connect"]

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, ResolvedConfig], StoreClient]


def store_url(config: ResolvedConfig) -> str:
    """Return the ``protocol://host:port`` base URL of the configured agent."""

    return f"{config.consul_protocol}://{config.consul_host}:{config.consul_port}"


def _default_client_factory(base_url: str, config: ResolvedConfig) -> StoreClient:
    return ConsulStoreClient(
        base_url, token=config.consul_token, timeout=config.request_timeout
    )


def _is_unhealthy(response: httpx.Response) -> bool:
    return not 200 <= response.status_code < 300


def _describe_outcome(retry_state: RetryCallState) -> str:
    outcome = retry_state.outcome
    if outcome is None:  # pragma: no cover - tenacity always sets an outcome here
        return "no outcome"
    exc = outcome.exception()
    if exc is not None:
        return str(exc) or type(exc).__name__
    return f"HTTP {outcome.result().status_code}"


def create_health_check_policy(
    fail_limit: int,
    fail_wait_time: float,
    *,
    url: str = "",
    sleep: Callable[[float], None] = time.sleep,
) -> Retrying:
    """Create the Tenacity policy used to probe the store status endpoint.

    Args:
        fail_limit: Maximum number of attempts; must be positive.
        fail_wait_time: Seconds to sleep between failed attempts.
        url: Base URL used in log lines.
        sleep: Sleep function, injectable for tests.

    Returns:
        Configured Tenacity Retrying object that raises ``RetryError`` once
        every attempt has failed.
    """

    def log_failure(retry_state: RetryCallState) -> None:
        logger.warning(
            "Health check %d/%d against %s failed: %s",
            retry_state.attempt_number,
            fail_limit,
            url + CONSUL_STATUS_PATH,
            _describe_outcome(retry_state),
        )

    return Retrying(
        stop=stop_after_attempt(fail_limit),
        wait=wait_fixed(fail_wait_time),
        retry=retry_if_exception_type(httpx.HTTPError) | retry_if_result(_is_unhealthy),
        after=log_failure,
        sleep=sleep,
        reraise=False,
    )


def connect(
    config: ResolvedConfig,
    *,
    client_factory: Optional[ClientFactory] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> StoreClient:
    """Return a store handle once the agent answers its health check.

    Raises:
        ConnectionExhausted: If ``fail_limit`` attempts all failed, or
            immediately when ``fail_limit`` is 0.
    """

    url = store_url(config)
    if config.fail_limit <= 0:
        raise ConnectionExhausted(
            f"Cannot get connection to Consul at {url}: fail_limit is {config.fail_limit}",
            url=url,
            attempts=0,
        )

    factory = client_factory or _default_client_factory
    client = factory(url, config)
    policy = create_health_check_policy(
        config.fail_limit, config.fail_wait_time, url=url, sleep=sleep
    )
    try:
        policy(client.health_check)
    except RetryError as exc:
        close = getattr(client, "close", None)
        if callable(close):
            close()
        raise ConnectionExhausted(
            f"Cannot get connection to Consul at {url} after "
            f"{exc.last_attempt.attempt_number} attempts",
            url=url,
            attempts=exc.last_attempt.attempt_number,
        ) from exc

    logger.info("Connected to Consul at %s", url)
    return client
