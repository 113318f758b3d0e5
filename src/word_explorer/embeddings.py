"""
Embedding providers that turn a word or phrase into a vector.

Wraps the Google GenAI embedding API (default) or a local
sentence-transformers model, each exposing a single async ``embed`` call.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from typing import Any, Protocol

from google.genai import Client as GenAIClient


logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "gemini-embedding-001"
_DEFAULT_DIM = 768
_DEFAULT_LOCAL_MODELS = (
    "intfloat/multilingual-e5-small",
    "sentence-transformers/all-MiniLM-L6-v2",
)


class EmbeddingProvider(Protocol):
    """Anything that can embed a single normalized text."""

    async def embed(self, text: str) -> list[float]:
        """Return the embedding vector for *text*."""


class GenAIEmbeddingProvider:
    """Generate word embeddings via Google GenAI."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        dim: int | None = None,
        client: Any | None = None,
    ) -> None:
        self.model = model or os.getenv("WORD_EXPLORER_EMBEDDING_MODEL", _DEFAULT_MODEL)
        self.dim = dim or int(os.getenv("WORD_EXPLORER_EMBEDDING_DIM", str(_DEFAULT_DIM)))

        if client is not None:
            self._client = client
        else:
            resolved_key = api_key or os.getenv("GOOGLE_API_KEY")
            if resolved_key is None:
                raise ValueError(
                    "GOOGLE_API_KEY not found. "
                    "Provide api_key or set the environment variable."
                )
            self._client = GenAIClient(api_key=resolved_key)

    async def embed(self, text: str) -> list[float]:
        """Embed a single word or phrase for similarity comparison."""
        result = await self._client.aio.models.embed_content(
            model=self.model,
            contents=[text],
            config={
                "task_type": "SEMANTIC_SIMILARITY",
                "output_dimensionality": self.dim,
            },
        )
        if not result.embeddings:
            raise ValueError("Embedding response contained no vectors")
        return list(result.embeddings[0].values)


class SentenceTransformerProvider:
    """
    Generate embeddings with a local sentence-transformers model.

    The first model in *model_names* that loads is used for the rest of the
    session. Encoding runs in a worker thread so concurrent ``embed`` calls do
    not block the event loop.
    """

    def __init__(self, model_names: tuple[str, ...] | None = None) -> None:
        env_model = os.getenv("WORD_EXPLORER_LOCAL_MODEL")
        if model_names is not None:
            self.model_names = model_names
        elif env_model:
            self.model_names = (env_model,)
        else:
            self.model_names = _DEFAULT_LOCAL_MODELS
        self.model_name: str | None = None
        self._model: Any | None = None
        self._load_lock = threading.Lock()

    def _load(self) -> Any:
        if self._model is not None:
            return self._model
        with self._load_lock:
            if self._model is None:
                self._model = self._load_first_available()
        return self._model

    def _load_first_available(self) -> Any:
        from sentence_transformers import SentenceTransformer

        errors: list[str] = []
        for name in self.model_names:
            try:
                model = SentenceTransformer(name)
            except (OSError, ValueError) as exc:
                logger.warning("Could not load embedding model %s: %s", name, exc)
                errors.append(f"{name}: {exc}")
                continue
            self.model_name = name
            logger.info("Loaded local embedding model %s", name)
            return model
        raise RuntimeError("No embedding model could be loaded (" + "; ".join(errors) + ")")

    def _encode(self, text: str) -> list[float]:
        model = self._load()
        vector = model.encode(text, normalize_embeddings=True)
        return [float(v) for v in vector]

    async def embed(self, text: str) -> list[float]:
        return await asyncio.to_thread(self._encode, text)


def create_embedding_provider(kind: str | None = None) -> EmbeddingProvider:
    """Build the provider named by *kind* or WORD_EXPLORER_EMBEDDING_PROVIDER."""
    resolved = (kind or os.getenv("WORD_EXPLORER_EMBEDDING_PROVIDER", "genai")).lower()
    if resolved == "genai":
        return GenAIEmbeddingProvider()
    if resolved == "local":
        return SentenceTransformerProvider()
    raise ValueError(f"Unknown embedding provider: {resolved!r} (expected 'genai' or 'local')")
