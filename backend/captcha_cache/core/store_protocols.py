"""Boundary Protocols — the slice of a redis-py async client this package relies on.

Invariants:
    - Infrastructure talks to redis-py only through StoreClient
    - execute_command is one request/response on one pooled connection

Design Decisions:
    - Protocol over ABC: redis.asyncio.Redis, RedisCluster and test fakes all fit
      structurally, no inheritance hierarchy (ADR: ExMA anti-pattern)
"""

from typing import Any, Protocol


class StoreClient(Protocol):
    """Structural contract for redis.asyncio.Redis / RedisCluster."""
    async def execute_command(self, *args: Any, **options: Any) -> Any: ...
    async def ping(self, **kwargs: Any) -> Any: ...
    async def aclose(self) -> None: ...
