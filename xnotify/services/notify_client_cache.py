"""
Pool of configured notification clients keyed by API key.
"""

from typing import Callable, Optional

from .bounded_cache import BoundedCache
from .notify_client import NotifyClient


class NotifyClientCache:
    """
    Reuses NotifyClient instances per API key, bounded with the same
    insertion-order eviction as the topic directory.
    """

    def __init__(
        self,
        cache: BoundedCache[str, NotifyClient],
        base_url: str,
        timeout: float = 10.0,
        client_factory: Optional[Callable[..., NotifyClient]] = None
    ):
        """
        Initialize client cache.

        Args:
            cache: Backing bounded cache
            base_url: Notification API endpoint
            timeout: Request timeout passed to new clients
            client_factory: Optional constructor override (for testing)
        """
        self.cache = cache
        self.base_url = base_url
        self.timeout = timeout
        self.client_factory = client_factory or NotifyClient

    def get_or_create(self, api_key: str) -> NotifyClient:
        """
        Return the cached client for ``api_key``, constructing it on a miss.

        Raises:
            ValueError: If the API key is malformed
        """
        client = self.cache.get(api_key)
        if client is None:
            client = self.client_factory(self.base_url, api_key, timeout=self.timeout)
            self.cache.put(api_key, client)
        return client

    def flush(self) -> int:
        """Drop every cached client."""
        return self.cache.clear()
