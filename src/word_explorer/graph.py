"""
Two-level neighbor graph around a query.

The central node is the query itself, the first level is the top of the
primary ranking, and the first few first-level words are expanded once more
into a handful of second-level neighbors. Second-level expansion is best
effort: a parent whose words cannot be resolved contributes nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Sequence

from .errors import ExplorerError
from .ranking import Candidate, RankingEngine
from .resolver import BatchEmbeddingResolver
from .similarity import SimilarityEngine


logger = logging.getLogger(__name__)

NodeLevel = Literal["central", "first", "second"]

CENTRAL_SIZE = 28.0


@dataclass(frozen=True)
class GraphNode:
    id: str
    similarity: float
    category: str
    level: NodeLevel
    size: float
    parent: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "similarity": self.similarity,
            "category": self.category,
            "level": self.level,
            "size": self.size,
        }
        if self.parent is not None:
            data["parent"] = self.parent
        return data


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str
    strength: float
    level: NodeLevel

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "strength": self.strength,
            "level": self.level,
        }


@dataclass
class Graph:
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def nodes_at(self, level: NodeLevel) -> list[GraphNode]:
        return [node for node in self.nodes if node.level == level]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }


class GraphBuilder:
    """Build the central/first/second level graph for a ranked result list."""

    def __init__(
        self,
        resolver: BatchEmbeddingResolver,
        engine: SimilarityEngine,
        ranking: RankingEngine,
        *,
        first_level_size: int = 8,
        expanded_parents: int = 2,
        batch_size: int = 15,
        max_candidates: int = 60,
        threshold: float = 0.55,
        top_k: int = 3,
        edge_factor: float = 0.8,
    ) -> None:
        self.resolver = resolver
        self.engine = engine
        self.ranking = ranking
        self.first_level_size = first_level_size
        self.expanded_parents = expanded_parents
        self.batch_size = batch_size
        self.max_candidates = max_candidates
        self.threshold = threshold
        self.top_k = top_k
        self.edge_factor = edge_factor

    async def build(
        self,
        central_id: str,
        ranked: Sequence[Candidate],
        *,
        vocabulary: Sequence[str],
        input_words: Sequence[str],
    ) -> Graph:
        graph = Graph()
        graph.nodes.append(
            GraphNode(
                id=central_id,
                similarity=1.0,
                category="central",
                level="central",
                size=CENTRAL_SIZE,
            )
        )

        first_level = list(ranked[: self.first_level_size])
        for candidate in first_level:
            graph.nodes.append(
                GraphNode(
                    id=candidate.word,
                    similarity=candidate.adjusted_similarity,
                    category=candidate.category,
                    level="first",
                    size=14 + candidate.adjusted_similarity * 10,
                )
            )
            graph.edges.append(
                GraphEdge(
                    source=central_id,
                    target=candidate.word,
                    strength=candidate.adjusted_similarity,
                    level="first",
                )
            )

        excluded = {w.lower() for w in input_words}
        excluded.update(c.word.lower() for c in first_level)
        seen: set[str] = set()

        for parent in first_level[: self.expanded_parents]:
            try:
                children = await self._expand(parent, vocabulary, excluded)
            except ExplorerError as exc:
                logger.warning("Second-level expansion failed for %r: %s", parent.word, exc)
                continue

            for child in children:
                if child.word in seen:
                    continue
                seen.add(child.word)
                graph.nodes.append(
                    GraphNode(
                        id=child.word,
                        similarity=child.adjusted_similarity,
                        category=child.category,
                        level="second",
                        size=8 + child.adjusted_similarity * 5,
                        parent=parent.word,
                    )
                )
                graph.edges.append(
                    GraphEdge(
                        source=parent.word,
                        target=child.word,
                        strength=child.adjusted_similarity * self.edge_factor,
                        level="second",
                    )
                )

        return graph

    async def _expand(
        self,
        parent: Candidate,
        vocabulary: Sequence[str],
        excluded: set[str],
    ) -> list[Candidate]:
        parent_vector = await self.resolver.resolve(parent.word)
        own = parent.word.lower()
        words = [w for w in vocabulary if w.lower() != own and w.lower() not in excluded]
        words = words[: self.max_candidates]
        if not words:
            return []

        vectors = await self.resolver.resolve_many(words, batch_size=self.batch_size)
        similarities = self.engine.cosine_similarities(parent_vector, vectors)
        return self.ranking.rank(
            parent.word,
            words,
            similarities,
            threshold=self.threshold,
            top_k=self.top_k,
        )
