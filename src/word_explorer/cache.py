"""
Session-lifetime memoization of text embeddings.
"""

from __future__ import annotations

import asyncio
from typing import TypeAlias

import numpy as np
import numpy.typing as npt

from .embeddings import EmbeddingProvider
from .errors import ProviderFailure


Vector: TypeAlias = npt.NDArray[np.float64]


def normalize_text(text: str) -> str:
    """Return the cache key for *text* (trimmed, lower-cased)."""
    return text.strip().lower()


def as_vector(values: object) -> Vector:
    """Copy *values* into a read-only 1-D float64 array."""
    vector = np.array(values, dtype=np.float64)
    if vector.ndim != 1:
        vector = vector.reshape(-1)
    vector.setflags(write=False)
    return vector


class EmbeddingCache:
    """
    Write-once, never-evicted map from normalized text to its vector.

    Concurrent misses for the same key share one provider call. A failed
    provider call leaves no entry behind, so the next lookup retries.
    """

    def __init__(self, provider: EmbeddingProvider) -> None:
        self.provider = provider
        self._vectors: dict[str, Vector] = {}
        self._pending: dict[str, asyncio.Task[Vector]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._vectors)

    def __contains__(self, text: object) -> bool:
        return isinstance(text, str) and normalize_text(text) in self._vectors

    def peek(self, text: str) -> Vector | None:
        """Return the cached vector for *text* without resolving it."""
        return self._vectors.get(normalize_text(text))

    async def get_or_resolve(self, text: str) -> Vector:
        key = normalize_text(text)
        cached = self._vectors.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        task = self._pending.get(key)
        if task is None or task.done():
            self.misses += 1
            task = asyncio.ensure_future(self._load(key))
            self._pending[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        return await task

    def _forget(self, key: str, task: asyncio.Task[Vector]) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]

    async def _load(self, key: str) -> Vector:
        try:
            values = await self.provider.embed(key)
        except ProviderFailure:
            raise
        except Exception as exc:
            raise ProviderFailure(key, str(exc) or type(exc).__name__) from exc

        vector = as_vector(values)
        if vector.size == 0:
            raise ProviderFailure(key, "empty embedding returned")
        # First writer wins; a concurrent load cannot replace a stored vector.
        return self._vectors.setdefault(key, vector)
