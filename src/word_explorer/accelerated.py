"""
Device-accelerated cosine similarity using torch.

Query and candidate matrix are uploaded as float32 tensors, the dot product
and both magnitudes are computed on the device, and one float32 per
candidate is read back. torch is an optional dependency (``accel`` extra);
its absence simply means no accelerator is available.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
import numpy.typing as npt

from .config import AcceleratorPreference
from .errors import BackendOperationFailure, BackendUnavailable


logger = logging.getLogger(__name__)


class TorchBackend:
    """Cosine similarity kernel on a torch device."""

    name = "accelerated"

    def __init__(self, device: str, *, torch_module: Any | None = None) -> None:
        if torch_module is None:
            import torch as torch_module
        self._torch = torch_module
        self.device = device

    def cosine_similarities(
        self,
        query: npt.NDArray[np.float64],
        candidates: npt.NDArray[np.float64],
    ) -> npt.NDArray[np.float64]:
        torch = self._torch
        try:
            with torch.no_grad():
                query_t = torch.as_tensor(query, dtype=torch.float32).to(self.device)
                matrix_t = torch.as_tensor(candidates, dtype=torch.float32).to(self.device)
                dots = matrix_t @ query_t
                magnitudes = torch.linalg.vector_norm(matrix_t, dim=1) * torch.linalg.vector_norm(query_t)
                similarities = torch.where(
                    magnitudes > 0,
                    dots / magnitudes,
                    torch.zeros_like(dots),
                )
                result = similarities.cpu().numpy()
        except Exception as exc:
            raise BackendOperationFailure(
                f"torch computation on {self.device} failed: {exc}"
            ) from exc
        return result.astype(np.float64)


def _pick_device(torch: Any, preference: AcceleratorPreference) -> str:
    if preference == "cpu":
        return "cpu"
    if preference in ("auto", "cuda") and torch.cuda.is_available():
        return "cuda"
    mps = getattr(torch.backends, "mps", None)
    if preference in ("auto", "mps") and mps is not None and mps.is_available():
        return "mps"
    raise BackendUnavailable(f"No torch device available for preference {preference!r}")


def probe_accelerator(preference: AcceleratorPreference = "auto") -> TorchBackend:
    """
    Initialize the accelerated backend once.

    ``auto`` picks CUDA, then MPS; ``cpu`` forces torch on the host (useful
    for benchmarks and tests); ``off`` disables acceleration. Raises
    BackendUnavailable when nothing usable is found.
    """
    if preference == "off":
        raise BackendUnavailable("Acceleration disabled by configuration")
    try:
        import torch
    except ImportError as exc:
        raise BackendUnavailable("torch is not installed") from exc

    device = _pick_device(torch, preference)
    backend = TorchBackend(device, torch_module=torch)
    # Smoke-test the device so broken drivers surface here, not per query.
    probe = np.ones((1, 4), dtype=np.float64)
    try:
        backend.cosine_similarities(probe[0], probe)
    except BackendOperationFailure as exc:
        raise BackendUnavailable(str(exc)) from exc
    logger.info("Accelerated similarity backend ready on %s", device)
    return backend
