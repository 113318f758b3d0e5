"""
WordExplorer - semantic neighbors and word arithmetic over embeddings.

This package resolves words to embedding vectors (with caching), scores a
vocabulary by cosine similarity on an accelerated or sequential path,
re-ranks the scores with a semantic category table and expands the best
matches into a two-level neighbor graph.

Example usage:
    >>> from word_explorer import SemanticExplorer, GenAIEmbeddingProvider
    >>> explorer = SemanticExplorer(GenAIEmbeddingProvider())
    >>> result = await explorer.search("rei")
    >>> result = await explorer.compute("rei - homem + mulher")
"""

from .cache import EmbeddingCache
from .categories import Category, CategoryMatch, CategoryModel
from .config import ExplorerSettings, resolve_settings
from .embeddings import (
    EmbeddingProvider,
    GenAIEmbeddingProvider,
    SentenceTransformerProvider,
    create_embedding_provider,
)
from .errors import (
    BackendOperationFailure,
    BackendUnavailable,
    ExplorerError,
    MalformedExpression,
    ProviderFailure,
    QueryError,
    VectorShapeError,
)
from .explorer import ExplorationResult, SemanticExplorer
from .graph import Graph, GraphBuilder, GraphEdge, GraphNode
from .ranking import Candidate, RankingEngine
from .resolver import BatchEmbeddingResolver
from .similarity import SimilarityEngine

__all__ = [
    # Pipeline
    "SemanticExplorer",
    "ExplorationResult",
    "ExplorerSettings",
    "resolve_settings",
    # Embeddings
    "EmbeddingProvider",
    "GenAIEmbeddingProvider",
    "SentenceTransformerProvider",
    "create_embedding_provider",
    "EmbeddingCache",
    "BatchEmbeddingResolver",
    # Scoring
    "SimilarityEngine",
    "Category",
    "CategoryMatch",
    "CategoryModel",
    "Candidate",
    "RankingEngine",
    # Graph
    "Graph",
    "GraphBuilder",
    "GraphEdge",
    "GraphNode",
    # Errors
    "ExplorerError",
    "ProviderFailure",
    "VectorShapeError",
    "BackendUnavailable",
    "BackendOperationFailure",
    "QueryError",
    "MalformedExpression",
]
