"""
Metrics Abstraction Layer for the DSNP Resolver

The HTTP driver records request counts, timings and exceptions through the
MetricsClient interface so the backend can be switched by configuration.

Key Components:
- MetricsClient: Abstract interface for all metrics operations
- TelegrafCompatibilityClient: Wrapper for aio-statsd's TelegrafStatsdClient
- NoOpMetricsClient: No-operation client for disabled metrics
- create_metrics_client: Factory function for backend selection
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

from aio_statsd import TelegrafStatsdClient

logger = logging.getLogger(__name__)

TagDict = Optional[Dict[str, Any]]


class MetricsClient(ABC):
    """
    Vendor-agnostic metrics client.

    Metric names are prefixed by the implementation where the backend
    supports it; tags are passed through as metric dimensions.
    """

    @abstractmethod
    def increment(
        self, name: str, value: Union[int, float] = 1, tag_dict: TagDict = None
    ) -> None:
        """Increment a counter metric by the specified value."""

    @abstractmethod
    def timer(
        self, name: str, value: Union[int, float], tag_dict: TagDict = None
    ) -> None:
        """Record a duration in seconds."""

    async def connect(self) -> None:
        """Open any connection the backend needs."""

    @abstractmethod
    async def close(self) -> None:
        """Flush pending metrics and close the backend connection."""


class TelegrafCompatibilityClient(MetricsClient):
    """MetricsClient backed by a TelegrafStatsdClient."""

    def __init__(self, telegraf_client: TelegrafStatsdClient, prefix: str = ""):
        self.client = telegraf_client
        self.prefix = prefix

    def _name(self, name: str) -> str:
        return f"{self.prefix}.{name}" if self.prefix else name

    def increment(
        self, name: str, value: Union[int, float] = 1, tag_dict: TagDict = None
    ) -> None:
        self.client.increment(self._name(name), value, tag_dict=tag_dict or {})

    def timer(
        self, name: str, value: Union[int, float], tag_dict: TagDict = None
    ) -> None:
        self.client.timer(self._name(name), value, tag_dict=tag_dict or {})

    async def connect(self) -> None:
        await self.client.connect()

    async def close(self) -> None:
        try:
            await self.client.close()
        except Exception as e:
            logger.warning(f"Error closing Telegraf client: {e}")


class NoOpMetricsClient(MetricsClient):
    """Metrics client that records nothing."""

    def increment(
        self, name: str, value: Union[int, float] = 1, tag_dict: TagDict = None
    ) -> None:
        pass

    def timer(
        self, name: str, value: Union[int, float], tag_dict: TagDict = None
    ) -> None:
        pass

    async def close(self) -> None:
        pass


def create_metrics_client(
    backend: str,
    host: str = "localhost",
    port: int = 8125,
    prefix: str = "",
    debug: bool = False,
) -> MetricsClient:
    """
    Create the metrics client for a backend name.

    Args:
        backend: Backend type ('telegraf' or 'none')
        host: Telegraf/StatsD host
        port: Telegraf/StatsD port
        prefix: Prefix added to every metric name
        debug: Enable aio-statsd debug output

    Raises:
        ValueError: If the backend type is unknown
    """
    backend = backend.lower()

    if backend == "telegraf":
        return TelegrafCompatibilityClient(
            TelegrafStatsdClient(host=host, port=port, debug=debug), prefix=prefix
        )
    elif backend == "none":
        logger.info("Metrics collection disabled (no-op client)")
        return NoOpMetricsClient()

    raise ValueError(
        f"Invalid metrics backend: {backend}. Supported backends: 'telegraf', 'none'"
    )
