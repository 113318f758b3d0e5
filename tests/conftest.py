from __future__ import annotations

import asyncio
from typing import Iterable, Sequence

import pytest

from word_explorer.config import ExplorerSettings
from word_explorer.explorer import SemanticExplorer
from word_explorer.similarity import SimilarityEngine


class StubProvider:
    """
    Deterministic embedding provider for tests.

    Explicit vectors are zero-padded to *dim*; every other text gets a
    one-hot vector starting at index *offset*, so unknown words are
    orthogonal to each other and to the explicit ones.
    """

    def __init__(
        self,
        vectors: dict[str, Sequence[float]] | None = None,
        *,
        dim: int = 512,
        offset: int = 8,
        fail_on: Iterable[str] = (),
        fail_once: Iterable[str] = (),
        delays: dict[str, float] | None = None,
    ) -> None:
        self.dim = dim
        self.offset = offset
        self.vectors = {
            text: list(values) + [0.0] * (dim - len(values))
            for text, values in (vectors or {}).items()
        }
        self.fail_on = set(fail_on)
        self.fail_once = set(fail_once)
        self.delays = delays or {}
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._one_hot: dict[str, int] = {}

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(text, 0))
            if text in self.fail_on:
                raise RuntimeError(f"model unavailable for {text}")
            if text in self.fail_once:
                self.fail_once.discard(text)
                raise RuntimeError(f"transient failure for {text}")
            if text in self.vectors:
                return self.vectors[text]
            index = self._one_hot.setdefault(text, self.offset + len(self._one_hot))
            vector = [0.0] * self.dim
            vector[index] = 1.0
            return vector
        finally:
            self.in_flight -= 1


# rei/rainha/princesa are close; trono and coroa sit near one princess-like
# parent each and duque near both, all below the primary threshold for rei.
GRAPH_VECTORS: dict[str, list[float]] = {
    "rei": [1.0, 0.0, 0.0],
    "rainha": [1.0, 0.2, 0.0],
    "princesa": [1.0, 0.0, 0.2],
    "trono": [0.5, 1.0, 0.0],
    "coroa": [0.5, 0.0, 1.0],
    "duque": [0.6, 1.0, 1.0],
}
GRAPH_VOCABULARY = ["rainha", "princesa", "trono", "coroa", "duque", "sol", "lua"]


@pytest.fixture()
def sequential_engine() -> SimilarityEngine:
    return SimilarityEngine(accelerator="off")


@pytest.fixture()
def make_explorer(sequential_engine):
    def _make(provider: StubProvider, **settings) -> SemanticExplorer:
        return SemanticExplorer(
            provider,
            settings=ExplorerSettings(accelerator="off", **settings),
            engine=sequential_engine,
        )

    return _make
