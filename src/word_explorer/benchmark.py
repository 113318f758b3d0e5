"""
Timing comparison between the sequential and accelerated strategies.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

import numpy as np

from .errors import BackendOperationFailure
from .similarity import SimilarityBackend, SimilarityEngine


@dataclass(frozen=True)
class TimingStats:
    """Wall-clock timings in milliseconds for one strategy."""

    times_ms: list[float] = field(default_factory=list)

    @property
    def avg_ms(self) -> float:
        return sum(self.times_ms) / len(self.times_ms) if self.times_ms else 0.0

    @property
    def min_ms(self) -> float:
        return min(self.times_ms, default=0.0)

    @property
    def max_ms(self) -> float:
        return max(self.times_ms, default=0.0)


@dataclass(frozen=True)
class BenchmarkReport:
    dim: int
    count: int
    iterations: int
    sequential: TimingStats
    accelerated: TimingStats | None
    max_abs_diff: float | None

    @property
    def speedup(self) -> float | None:
        if self.accelerated is None or self.accelerated.avg_ms == 0:
            return None
        return self.sequential.avg_ms / self.accelerated.avg_ms


def _time_backend(
    backend: SimilarityBackend,
    query: np.ndarray,
    matrix: np.ndarray,
    iterations: int,
) -> tuple[TimingStats, np.ndarray]:
    times: list[float] = []
    result = np.zeros(0)
    for _ in range(iterations):
        start = time.perf_counter()
        result = backend.cosine_similarities(query, matrix)
        times.append((time.perf_counter() - start) * 1000)
    return TimingStats(times), result


def run_benchmark(
    engine: SimilarityEngine,
    *,
    dim: int = 384,
    count: int = 100,
    iterations: int = 5,
    seed: int = 0,
) -> BenchmarkReport:
    """Time both strategies on random vectors in [-1, 1).

    The accelerated side is skipped when the engine has no accelerator or
    when it fails mid-run.
    """
    if dim < 1 or count < 1 or iterations < 1:
        raise ValueError("dim, count and iterations must be >= 1")

    rng = np.random.default_rng(seed)
    query = rng.uniform(-1.0, 1.0, size=dim)
    matrix = rng.uniform(-1.0, 1.0, size=(count, dim))

    sequential, reference = _time_backend(engine.sequential, query, matrix, iterations)

    accelerated: TimingStats | None = None
    max_abs_diff: float | None = None
    if engine.accelerated is not None:
        try:
            accelerated, result = _time_backend(engine.accelerated, query, matrix, iterations)
        except BackendOperationFailure:
            accelerated = None
        else:
            max_abs_diff = float(np.max(np.abs(result - reference)))

    return BenchmarkReport(
        dim=dim,
        count=count,
        iterations=iterations,
        sequential=sequential,
        accelerated=accelerated,
        max_abs_diff=max_abs_diff,
    )
