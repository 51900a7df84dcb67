"""Storage abstractions and Redis implementation for repositories."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..domain.errors import ConcurrentUpdateError
from .database import DatabaseClient
from .scripts import LEDGER_SCRIPTS


class KeyValueStore(ABC):
    """Abstract key-value store with minimal operations used by repositories."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def mget(self, keys: List[str]) -> List[Optional[str]]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def register_script(self, name: str, script: str) -> str:
        """Load a Lua script and remember it under ``name``; returns its SHA1."""
        pass

    @abstractmethod
    async def run_script(self, name: str, keys: List[str], args: List[str]) -> Any:
        pass


class RedisKeyValueStore(KeyValueStore):
    """Redis-backed implementation of KeyValueStore."""

    def __init__(self, db_client: DatabaseClient):
        self._db_client = db_client
        self._script_shas: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        async with self._db_client.get_connection() as conn:
            return await conn.get(key)

    async def mget(self, keys: List[str]) -> List[Optional[str]]:
        async with self._db_client.get_connection() as conn:
            return await conn.mget(keys)

    async def set(self, key: str, value: str) -> None:
        async with self._db_client.get_connection() as conn:
            await conn.set(key, value)

    async def register_script(self, name: str, script: str) -> str:
        async with self._db_client.get_connection() as conn:
            sha = await conn.script_load(script)
        self._script_shas[name] = sha
        return sha

    async def run_script(self, name: str, keys: List[str], args: List[str]) -> Any:
        sha = self._script_shas.get(name)
        if sha is None:
            raise ValueError(f"Script '{name}' not registered")
        async with self._db_client.get_connection() as conn:
            return await conn.evalsha(sha, len(keys), *keys, *args)


async def register_ledger_scripts(store: KeyValueStore) -> None:
    for name, script in LEDGER_SCRIPTS.items():
        await store.register_script(name, script)


class AtomicBatch:
    """Reads and writes staged against a store and committed all at once.

    Every key read through the batch is pinned to the value seen; ``commit``
    applies the staged writes only if none of those keys changed meanwhile.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._expected: Dict[str, Optional[str]] = {}
        self._updates: Dict[str, str] = {}

    async def read(self, key: str) -> Optional[str]:
        if key in self._updates:
            return self._updates[key]
        if key not in self._expected:
            self._expected[key] = await self._store.get(key)
        return self._expected[key]

    async def read_int(self, key: str) -> int:
        raw = await self.read(key)
        return int(raw) if raw else 0

    def write(self, key: str, value: str) -> None:
        self._updates[key] = value

    def write_int(self, key: str, value: int) -> None:
        self._updates[key] = str(value)

    async def commit(self) -> None:
        for key in self._updates:
            if key not in self._expected:
                self._expected[key] = await self._store.get(key)
        keys = list(self._expected)
        expected = [self._expected[k] or "" for k in keys]
        new_values = [self._updates.get(k, self._expected[k] or "") for k in keys]
        status, conflicting_key = await self._store.run_script(
            "commit_batch", keys, expected + new_values
        )
        if int(status) != 1:
            raise ConcurrentUpdateError(
                f"Key {conflicting_key} changed during the operation"
            )
