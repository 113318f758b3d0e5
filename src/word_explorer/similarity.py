"""
Cosine similarity between one query vector and a candidate set.

The engine holds one of two strategies, selected once at construction:
``accelerated`` (a torch device backend) or ``sequential`` (numpy on the
host). The sequential strategy is always available and is the reference
result; an accelerated call that fails is retried on it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Protocol, Sequence

import numpy as np
import numpy.typing as npt

from .accelerated import probe_accelerator
from .config import AcceleratorPreference
from .errors import BackendOperationFailure, BackendUnavailable, VectorShapeError


logger = logging.getLogger(__name__)

ComputeStrategy = Literal["accelerated", "sequential"]


class SimilarityBackend(Protocol):
    name: str

    def cosine_similarities(
        self,
        query: npt.NDArray[np.float64],
        candidates: npt.NDArray[np.float64],
    ) -> npt.NDArray[np.float64]:
        """Return one similarity per candidate row."""


class SequentialBackend:
    """Host-side cosine similarity with numpy."""

    name = "sequential"

    def cosine_similarities(
        self,
        query: npt.NDArray[np.float64],
        candidates: npt.NDArray[np.float64],
    ) -> npt.NDArray[np.float64]:
        dots = candidates @ query
        magnitudes = np.linalg.norm(candidates, axis=1) * np.linalg.norm(query)
        result = np.zeros(len(candidates), dtype=np.float64)
        np.divide(dots, magnitudes, out=result, where=magnitudes != 0)
        return result


@dataclass(frozen=True)
class EngineInfo:
    """Snapshot of the engine's strategy for status reporting."""

    strategy: ComputeStrategy
    device: str | None
    accelerated_calls: int
    sequential_calls: int
    fallbacks: int

    def to_dict(self) -> dict[str, object]:
        return {
            "strategy": self.strategy,
            "device": self.device,
            "accelerated_calls": self.accelerated_calls,
            "sequential_calls": self.sequential_calls,
            "fallbacks": self.fallbacks,
        }


def _as_matrix(
    query: Sequence[float] | npt.NDArray[np.float64],
    candidates: Sequence[Sequence[float] | npt.NDArray[np.float64]],
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    query_arr = np.asarray(query, dtype=np.float64)
    if query_arr.ndim != 1 or query_arr.size == 0:
        raise VectorShapeError("Query must be a non-empty 1-D vector")
    dim = query_arr.shape[0]
    for index, candidate in enumerate(candidates):
        if len(candidate) != dim:
            raise VectorShapeError(
                f"Candidate {index} has length {len(candidate)}, expected {dim}"
            )
    matrix = np.asarray(candidates, dtype=np.float64).reshape(len(candidates), dim)
    return query_arr, matrix


class SimilarityEngine:
    """Compute cosine similarities with an accelerated or sequential strategy."""

    def __init__(
        self,
        *,
        accelerator: AcceleratorPreference = "auto",
        backend: SimilarityBackend | None = None,
    ) -> None:
        self.sequential = SequentialBackend()
        self.accelerated: SimilarityBackend | None = backend
        if self.accelerated is None:
            try:
                self.accelerated = probe_accelerator(accelerator)
            except BackendUnavailable as exc:
                logger.info("Using sequential similarity: %s", exc)
        self.accelerated_calls = 0
        self.sequential_calls = 0
        self.fallbacks = 0

    @property
    def strategy(self) -> ComputeStrategy:
        return "accelerated" if self.accelerated is not None else "sequential"

    def describe(self) -> EngineInfo:
        return EngineInfo(
            strategy=self.strategy,
            device=getattr(self.accelerated, "device", None),
            accelerated_calls=self.accelerated_calls,
            sequential_calls=self.sequential_calls,
            fallbacks=self.fallbacks,
        )

    def cosine_similarities(
        self,
        query: Sequence[float] | npt.NDArray[np.float64],
        candidates: Sequence[Sequence[float] | npt.NDArray[np.float64]],
    ) -> list[float]:
        """Return cosine similarity of *query* against each candidate, in order.

        A zero-magnitude vector on either side gives exactly 0.0.
        """
        query_arr, matrix = _as_matrix(query, candidates)
        if matrix.shape[0] == 0:
            return []

        if self.accelerated is not None:
            try:
                result = self.accelerated.cosine_similarities(query_arr, matrix)
            except BackendOperationFailure as exc:
                self.fallbacks += 1
                logger.warning("Accelerated similarity failed, using sequential: %s", exc)
            else:
                self.accelerated_calls += 1
                return [float(v) for v in result]

        self.sequential_calls += 1
        return [float(v) for v in self.sequential.cosine_similarities(query_arr, matrix)]
