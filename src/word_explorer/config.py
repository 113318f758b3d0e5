"""
Configuration helpers for the exploration pipeline.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Literal


AcceleratorPreference = Literal["auto", "cuda", "mps", "cpu", "off"]

ENV_PREFIX = "WORD_EXPLORER_"
_ACCELERATOR_CHOICES = ("auto", "cuda", "mps", "cpu", "off")


@dataclass(frozen=True)
class ExplorerSettings:
    """Tunables for ranking, batching and graph expansion."""

    similarity_threshold: float = 0.50
    top_k: int = 12
    fallback_threshold: float = 0.30
    fallback_top_k: int = 10
    search_batch_size: int = 20
    compute_batch_size: int = 25
    first_level_size: int = 8
    expanded_parents: int = 2
    second_level_batch_size: int = 15
    second_level_max_candidates: int = 60
    second_level_threshold: float = 0.55
    second_level_top_k: int = 3
    second_level_edge_factor: float = 0.8
    accelerator: AcceleratorPreference = "auto"
    categories_path: str | None = None


def _coerce(name: str, raw: str, default: Any) -> Any:
    env_name = ENV_PREFIX + name.upper()
    try:
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid value for {env_name}: {raw!r}") from exc
    return raw


def resolve_settings(**overrides: Any) -> ExplorerSettings:
    """
    Build settings from explicit overrides, env vars and defaults.

    Precedence:
    1) explicit keyword override (ignored when None)
    2) WORD_EXPLORER_<FIELD_NAME> environment variable
    3) dataclass default
    """
    defaults = ExplorerSettings()
    known = {f.name for f in fields(ExplorerSettings)}
    unknown = set(overrides) - known
    if unknown:
        raise TypeError(f"Unknown settings: {', '.join(sorted(unknown))}")

    values: dict[str, Any] = {}
    for name in known:
        override = overrides.get(name)
        if override is not None:
            values[name] = override
            continue
        raw = os.getenv(ENV_PREFIX + name.upper())
        if raw is not None and raw != "":
            values[name] = _coerce(name, raw, getattr(defaults, name))

    settings = replace(defaults, **values)
    if settings.accelerator not in _ACCELERATOR_CHOICES:
        raise ValueError(
            f"Invalid accelerator {settings.accelerator!r}; "
            f"expected one of {', '.join(_ACCELERATOR_CHOICES)}"
        )
    return settings
