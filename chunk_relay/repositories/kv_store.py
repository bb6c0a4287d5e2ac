"""Key-value store backends for session documents."""

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, Optional
import redis.asyncio as aioredis
from redis.exceptions import WatchError


class KeyValueStore(ABC):
    """String key to string value store with a compare-and-set primitive."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when absent."""

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Store a value unconditionally."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key if present."""

    @abstractmethod
    async def compare_and_set(
        self, key: str, expected: Optional[str], new: Optional[str]
    ) -> bool:
        """
        Atomically replace the value of ``key`` if it currently equals ``expected``.
        Args:
            key: Store key
            expected: Value the key must hold, None meaning absent
            new: Replacement value, None meaning delete
        Returns:
            True if the write happened
        """


class RedisKeyValueStore(KeyValueStore):
    """Redis-backed store; compare-and-set uses WATCH/MULTI/EXEC."""

    def __init__(self, client: aioredis.Redis):
        self.client = client

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def put(self, key: str, value: str) -> None:
        await self.client.set(key, value)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def compare_and_set(
        self, key: str, expected: Optional[str], new: Optional[str]
    ) -> bool:
        async with self.client.pipeline(transaction=True) as pipe:
            try:
                await pipe.watch(key)
                current = await pipe.get(key)
                if current != expected:
                    await pipe.unwatch()
                    return False
                pipe.multi()
                if new is None:
                    pipe.delete(key)
                else:
                    pipe.set(key, new)
                await pipe.execute()
                return True
            except WatchError:
                return False


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store for development and tests."""

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        async with self._lock:
            self._data[key] = value

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._data.pop(key, None)

    async def compare_and_set(
        self, key: str, expected: Optional[str], new: Optional[str]
    ) -> bool:
        async with self._lock:
            if self._data.get(key) != expected:
                return False
            if new is None:
                self._data.pop(key, None)
            else:
                self._data[key] = new
            return True
