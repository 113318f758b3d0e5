"""
Batched word-to-vector resolution through the embedding cache.
"""

from __future__ import annotations

import asyncio
from typing import Sequence

from .cache import EmbeddingCache, Vector
from .errors import VectorShapeError


_DEFAULT_BATCH_SIZE = 20


def ensure_uniform_length(vectors: Sequence[Vector], *, expected: int | None = None) -> int | None:
    """Raise VectorShapeError unless every vector has the same length.

    Returns the shared length, or None for an empty sequence without
    *expected*.
    """
    length = expected
    for index, vector in enumerate(vectors):
        if length is None:
            length = len(vector)
        elif len(vector) != length:
            raise VectorShapeError(
                f"Vector {index} has length {len(vector)}, expected {length}"
            )
    return length


class BatchEmbeddingResolver:
    """Resolve words to vectors in fixed-size, sequential batches."""

    def __init__(self, cache: EmbeddingCache, *, batch_size: int = _DEFAULT_BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.cache = cache
        self.batch_size = batch_size

    async def resolve(self, text: str) -> Vector:
        """Resolve a single text through the cache."""
        return await self.cache.get_or_resolve(text)

    async def resolve_many(
        self,
        words: Sequence[str],
        batch_size: int | None = None,
    ) -> list[Vector]:
        """Resolve *words* in order.

        Words inside one batch are resolved concurrently; batches run one
        after another, so at most *batch_size* provider calls are in flight.
        Any single failure fails the whole call.
        """
        size = self.batch_size if batch_size is None else batch_size
        if size < 1:
            raise ValueError("batch_size must be >= 1")

        vectors: list[Vector] = []
        for start in range(0, len(words), size):
            batch = words[start : start + size]
            resolved = await asyncio.gather(
                *(self.cache.get_or_resolve(word) for word in batch)
            )
            vectors.extend(resolved)

        ensure_uniform_length(vectors)
        return vectors
