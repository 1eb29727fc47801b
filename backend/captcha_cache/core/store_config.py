"""Store Config — immutable description of where the store lives and how to pool it.

Invariants:
    - Single mode has exactly one URL; cluster mode has at least one startup URL
    - Cluster URLs are all redis:// or all rediss:// (unix:// sockets cannot form a cluster)
    - Frozen after construction; the factory only reads it

Design Decisions:
    - Classmethod constructors over a mode flag in callers: StoreConfig.single(url) /
      StoreConfig.cluster(urls) read like the two deployment shapes they are
"""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

CLUSTER_SCHEMES = {"redis", "rediss"}


class StoreMode(str, Enum):
    SINGLE = "single"
    CLUSTER = "cluster"


@dataclass(frozen=True)
class StoreConfig:
    """Endpoint(s) plus pool tuning for the Redis store."""
    mode: StoreMode
    urls: tuple[str, ...]
    max_connections: int = 20
    pool_timeout_seconds: float | None = 5.0
    socket_timeout_seconds: float | None = None

    def __post_init__(self):
        if not self.urls:
            raise ValueError("StoreConfig needs at least one URL")
        if self.mode is StoreMode.SINGLE and len(self.urls) != 1:
            raise ValueError("single-node StoreConfig takes exactly one URL")
        if self.max_connections < 1:
            raise ValueError("max_connections must be at least 1")
        if self.mode is StoreMode.CLUSTER:
            schemes = {urlparse(url).scheme for url in self.urls}
            if not schemes <= CLUSTER_SCHEMES:
                raise ValueError(f"cluster URLs must use redis:// or rediss://, got {sorted(schemes)}")
            if len(schemes) > 1:
                raise ValueError("cluster URLs mix redis:// and rediss://")

    @property
    def tls(self) -> bool:
        return urlparse(self.urls[0]).scheme == "rediss"

    @classmethod
    def single(cls, url: str, **pool_options) -> "StoreConfig":
        return cls(StoreMode.SINGLE, (url,), **pool_options)

    @classmethod
    def cluster(cls, urls: list[str] | tuple[str, ...], **pool_options) -> "StoreConfig":
        return cls(StoreMode.CLUSTER, tuple(urls), **pool_options)
