"""Redis Store — pooled async redis-py client with error mapping and health checks.

Invariants:
    - Store.connect() PINGs before returning; unreachable store → StoreConnectionError
    - get_client() never does IO and never fails; pool checkout happens per command
    - Each exec() is one request/response on one connection checked out of the pool
      (BlockingConnectionPool for single node, per-node pools in RedisCluster)
    - All redis-py exceptions mapped to StoreError (core/errors.py), cause chained
    - No retries: clients are built with Retry(NoBackoff(), 0)
    - Store.close() also disconnects the pool (Redis.from_pool hands ownership to the client)

Design Decisions:
    - Thin wrapper over raw client: isolates transport errors from module semantics
      (ADR: single responsibility)
    - decode_responses=True: module replies are UTF-8 JSON and integers
    - Cluster: keyed commands routed to the slot owner of their key, keyless
      introspection to a random node
    - Cluster: credentials from the first URL; rediss:// switches every node to TLS
"""

import logging
from typing import Any
from urllib.parse import urlparse

from redis.asyncio import BlockingConnectionPool, Redis
from redis.asyncio.cluster import ClusterNode, RedisCluster
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff
from redis.exceptions import RedisClusterException, RedisError

from captcha_cache.core.errors import (
    ErrorContext, StoreConnectionError, StoreError,
)
from captcha_cache.core.store_config import StoreConfig, StoreMode
from captcha_cache.core.store_protocols import StoreClient

logger = logging.getLogger(__name__)

# RedisClusterException does not derive from RedisError
_TRANSPORT_ERRORS = (RedisError, RedisClusterException)


def _no_retry() -> Retry:
    return Retry(NoBackoff(), 0)


def _build_single(config: StoreConfig) -> Redis:
    pool = BlockingConnectionPool.from_url(
        config.urls[0],
        max_connections=config.max_connections,
        timeout=config.pool_timeout_seconds,
        socket_timeout=config.socket_timeout_seconds,
        decode_responses=True,
        retry=_no_retry(),
    )
    return Redis.from_pool(pool)


def _build_cluster(config: StoreConfig) -> RedisCluster:
    parsed = [urlparse(url) for url in config.urls]
    nodes = [ClusterNode(p.hostname or "localhost", p.port or 6379) for p in parsed]
    return RedisCluster(
        startup_nodes=nodes,
        username=parsed[0].username,
        password=parsed[0].password,
        ssl=config.tls,
        max_connections=config.max_connections,
        socket_timeout=config.socket_timeout_seconds,
        decode_responses=True,
        retry=_no_retry(),
    )


def build_client(config: StoreConfig) -> StoreClient:
    """Construct (but do not connect) the redis-py client for `config`."""
    if config.mode is StoreMode.CLUSTER:
        return _build_cluster(config)
    return _build_single(config)


class StoreConnection:
    """Lightweight handle on the shared pool. Safe to share between tasks."""

    def __init__(self, client: StoreClient, config: StoreConfig):
        self._client = client
        self._config = config

    async def exec(
        self, *args: Any, key: str | None = None, operation: str | None = None,
    ) -> Any:
        """Run one command and return the raw reply.

        `key` routes the command in cluster mode; keyless commands go to a
        random node there. Single-node clients ignore routing.
        """
        operation = operation or str(args[0])
        try:
            return await self._client.execute_command(*args, **self._routing(key))
        except _TRANSPORT_ERRORS as e:
            logger.error(
                f"Redis command failed: {e}",
                extra={"operation": operation, "captcha_id": key},
            )
            raise StoreError(
                str(e), operation, ErrorContext(captcha_id=key, command=operation),
            ) from e

    def _routing(self, key: str | None) -> dict:
        if self._config.mode is not StoreMode.CLUSTER:
            return {}
        if key is None:
            return {"target_nodes": RedisCluster.RANDOM}
        return {"target_nodes": self._client.get_node_from_key(key)}


class Store:
    """Owns the redis-py client and its pool for the process lifetime."""

    def __init__(self, client: StoreClient, config: StoreConfig):
        self.client = client
        self.config = config

    @classmethod
    async def connect(cls, config: StoreConfig) -> "Store":
        """Build the client and verify the store answers PING."""
        client = build_client(config)
        try:
            if isinstance(client, RedisCluster):
                await client.initialize()
            await client.ping()
        except _TRANSPORT_ERRORS + (OSError,) as e:
            logger.error(
                f"Redis connection failed: {e}",
                extra={"operation": "connect"},
            )
            await client.aclose()
            raise StoreConnectionError(str(e)) from e
        logger.info(
            f"Connected to Redis ({config.mode.value}, {len(config.urls)} endpoint(s))",
        )
        return cls(client, config)

    def get_client(self) -> StoreConnection:
        return StoreConnection(self.client, self.config)

    async def health_check(self) -> bool:
        """Check store connectivity (for readiness checks)."""
        try:
            await self.client.ping()
            return True
        except _TRANSPORT_ERRORS as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.client.aclose()
