"""
Query pipeline: resolve, score, rank and build the neighbor graph.

Every query takes a generation number from a monotonic counter. Only the
newest generation may be published as the explorer's latest result, so a
slow query that finishes after a newer one was issued never overwrites it.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, replace
from typing import Any, Literal, Sequence

from .cache import EmbeddingCache, Vector
from .categories import CategoryModel
from .config import ExplorerSettings, resolve_settings
from .embeddings import EmbeddingProvider, create_embedding_provider
from .errors import QueryError
from .expression import combine_vectors, input_words, parse_expression
from .graph import Graph, GraphBuilder
from .ranking import Candidate, RankingEngine
from .resolver import BatchEmbeddingResolver
from .similarity import ComputeStrategy, SimilarityEngine


logger = logging.getLogger(__name__)

QueryKind = Literal["search", "compute"]


@dataclass(frozen=True)
class ExplorationResult:
    """Ranked list plus graph for one query."""

    generation: int
    kind: QueryKind
    query: str
    category: str
    results: list[Candidate]
    graph: Graph
    degraded: bool
    strategy: ComputeStrategy
    stale: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "generation": self.generation,
            "kind": self.kind,
            "query": self.query,
            "category": self.category,
            "degraded": self.degraded,
            "strategy": self.strategy,
            "stale": self.stale,
            "results": [candidate.to_dict() for candidate in self.results],
            "graph": self.graph.to_dict(),
        }


def _unique_words(words: Sequence[str]) -> list[str]:
    """Trim *words* and drop repeats (case-insensitive), keeping first-seen order."""
    seen: set[str] = set()
    unique: list[str] = []
    for word in words:
        word = word.strip()
        key = word.lower()
        if not word or key in seen:
            continue
        seen.add(key)
        unique.append(word)
    return unique


class GenerationTracker:
    """Hands out query generations and keeps the newest published result."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self.current = 0
        self.latest: ExplorationResult | None = None

    def next(self) -> int:
        self.current = next(self._counter)
        return self.current

    def is_current(self, generation: int) -> bool:
        return generation == self.current

    def publish(self, result: ExplorationResult) -> ExplorationResult:
        """Store *result* as latest unless a newer query has started."""
        if not self.is_current(result.generation):
            logger.debug(
                "Discarding stale result for %r (generation %d, current %d)",
                result.query,
                result.generation,
                self.current,
            )
            return replace(result, stale=True)
        self.latest = result
        return result


class SemanticExplorer:
    """Entry point for word search and word arithmetic."""

    def __init__(
        self,
        provider: EmbeddingProvider,
        *,
        settings: ExplorerSettings | None = None,
        categories: CategoryModel | None = None,
        engine: SimilarityEngine | None = None,
    ) -> None:
        self.settings = settings or ExplorerSettings()
        if categories is None:
            categories = (
                CategoryModel.from_json(self.settings.categories_path)
                if self.settings.categories_path
                else CategoryModel()
            )
        self.categories = categories
        self.cache = EmbeddingCache(provider)
        self.resolver = BatchEmbeddingResolver(
            self.cache, batch_size=self.settings.search_batch_size
        )
        self.engine = engine or SimilarityEngine(accelerator=self.settings.accelerator)
        self.ranking = RankingEngine(self.categories)
        self.graph_builder = GraphBuilder(
            self.resolver,
            self.engine,
            self.ranking,
            first_level_size=self.settings.first_level_size,
            expanded_parents=self.settings.expanded_parents,
            batch_size=self.settings.second_level_batch_size,
            max_candidates=self.settings.second_level_max_candidates,
            threshold=self.settings.second_level_threshold,
            top_k=self.settings.second_level_top_k,
            edge_factor=self.settings.second_level_edge_factor,
        )
        self.generations = GenerationTracker()

    @classmethod
    def from_env(
        cls,
        provider: EmbeddingProvider | None = None,
        **overrides: Any,
    ) -> SemanticExplorer:
        """Build an explorer from WORD_EXPLORER_* settings."""
        settings = resolve_settings(**overrides)
        return cls(provider or create_embedding_provider(), settings=settings)

    @property
    def latest(self) -> ExplorationResult | None:
        return self.generations.latest

    async def search(
        self,
        word: str,
        vocabulary: Sequence[str] | None = None,
    ) -> ExplorationResult:
        """Rank the vocabulary against a single word."""
        query = word.strip()
        if not query:
            raise QueryError("Search word must not be empty")

        generation = self.generations.next()
        query_vector = await self.resolver.resolve(query)
        return await self._explore(
            generation=generation,
            kind="search",
            central_id=query,
            base_word=query,
            excluded=[query.lower()],
            query_vector=query_vector,
            vocabulary=vocabulary,
            batch_size=self.settings.search_batch_size,
        )

    async def compute(
        self,
        expression: str,
        vocabulary: Sequence[str] | None = None,
    ) -> ExplorationResult:
        """Rank the vocabulary against a combination such as ``rei - homem + mulher``."""
        terms = parse_expression(expression)
        words = input_words(terms)

        generation = self.generations.next()
        vectors = await self.resolver.resolve_many(
            [term.word for term in terms], batch_size=self.settings.compute_batch_size
        )
        query_vector = combine_vectors(terms, vectors)
        return await self._explore(
            generation=generation,
            kind="compute",
            central_id=expression.strip(),
            base_word=words[0],
            excluded=words,
            query_vector=query_vector,
            vocabulary=vocabulary,
            batch_size=self.settings.compute_batch_size,
        )

    async def _explore(
        self,
        *,
        generation: int,
        kind: QueryKind,
        central_id: str,
        base_word: str,
        excluded: list[str],
        query_vector: Vector,
        vocabulary: Sequence[str] | None,
        batch_size: int,
    ) -> ExplorationResult:
        vocab = (
            _unique_words(vocabulary)
            if vocabulary is not None
            else self.categories.vocabulary()
        )
        excluded_set = set(excluded)
        words = [w for w in vocab if w.lower() not in excluded_set]

        vectors = await self.resolver.resolve_many(words, batch_size=batch_size)
        similarities = self.engine.cosine_similarities(query_vector, vectors)
        outcome = self.ranking.rank_with_fallback(
            base_word,
            words,
            similarities,
            threshold=self.settings.similarity_threshold,
            top_k=self.settings.top_k,
            fallback_threshold=self.settings.fallback_threshold,
            fallback_top_k=self.settings.fallback_top_k,
        )

        graph = await self.graph_builder.build(
            central_id,
            outcome.candidates,
            vocabulary=vocab,
            input_words=excluded,
        )

        result = ExplorationResult(
            generation=generation,
            kind=kind,
            query=central_id,
            category=self.categories.category_of(base_word).name,
            results=outcome.candidates,
            graph=graph,
            degraded=outcome.degraded,
            strategy=self.engine.strategy,
        )
        return self.generations.publish(result)
