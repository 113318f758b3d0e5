"""Tests for the two-level neighbor graph."""

from __future__ import annotations

import pytest

from conftest import GRAPH_VECTORS, GRAPH_VOCABULARY, StubProvider
from word_explorer.cache import EmbeddingCache
from word_explorer.categories import CategoryModel
from word_explorer.graph import Graph, GraphBuilder
from word_explorer.ranking import RankingEngine
from word_explorer.resolver import BatchEmbeddingResolver


def _builder(provider: StubProvider, engine, **kwargs) -> GraphBuilder:
    resolver = BatchEmbeddingResolver(EmbeddingCache(provider))
    return GraphBuilder(resolver, engine, RankingEngine(CategoryModel()), **kwargs)


async def _first_level(builder: GraphBuilder, query: str = "rei"):
    query_vector = await builder.resolver.resolve(query)
    words = [w for w in GRAPH_VOCABULARY if w != query]
    vectors = await builder.resolver.resolve_many(words)
    similarities = builder.engine.cosine_similarities(query_vector, vectors)
    return builder.ranking.rank(query, words, similarities)


def _assert_well_formed(graph: Graph) -> None:
    central = graph.nodes_at("central")
    first_ids = {node.id for node in graph.nodes_at("first")}
    assert len(central) == 1
    assert len(first_ids) <= 8

    for node_id in first_ids:
        incoming = [e for e in graph.edges if e.target == node_id]
        assert len(incoming) == 1
        assert incoming[0].source == central[0].id
        assert incoming[0].level == "first"

    for node in graph.nodes_at("second"):
        incoming = [e for e in graph.edges if e.target == node.id and e.level == "second"]
        assert len(incoming) == 1
        assert incoming[0].source == node.parent
        assert node.parent in first_ids


@pytest.mark.asyncio
async def test_graph_levels_and_edges(sequential_engine) -> None:
    builder = _builder(StubProvider(GRAPH_VECTORS), sequential_engine)
    ranked = await _first_level(builder)
    assert [c.word for c in ranked] == ["rainha", "princesa"]

    graph = await builder.build(
        "rei", ranked, vocabulary=GRAPH_VOCABULARY, input_words=["rei"]
    )

    _assert_well_formed(graph)
    assert [(n.id, n.level) for n in graph.nodes] == [
        ("rei", "central"),
        ("rainha", "first"),
        ("princesa", "first"),
        ("trono", "second"),
        ("duque", "second"),
        ("coroa", "second"),
    ]
    by_id = {node.id: node for node in graph.nodes}
    # duque is close to both parents; the first parent keeps it.
    assert by_id["duque"].parent == "rainha"
    assert by_id["coroa"].parent == "princesa"

    central = by_id["rei"]
    assert central.similarity == 1.0
    assert central.size == 28

    rainha = ranked[0]
    assert by_id["rainha"].size == pytest.approx(14 + rainha.adjusted_similarity * 10)
    assert by_id["trono"].size == pytest.approx(8 + by_id["trono"].similarity * 5)

    edges = {(e.source, e.target): e for e in graph.edges}
    assert edges[("rei", "rainha")].strength == pytest.approx(rainha.adjusted_similarity)
    trono_edge = edges[("rainha", "trono")]
    assert trono_edge.level == "second"
    assert trono_edge.strength == pytest.approx(by_id["trono"].similarity * 0.8)
    assert by_id["trono"].similarity >= 0.55


@pytest.mark.asyncio
async def test_only_top_parents_are_expanded(sequential_engine) -> None:
    builder = _builder(StubProvider(GRAPH_VECTORS), sequential_engine, expanded_parents=1)
    ranked = await _first_level(builder)

    graph = await builder.build(
        "rei", ranked, vocabulary=GRAPH_VOCABULARY, input_words=["rei"]
    )

    assert {n.parent for n in graph.nodes_at("second")} == {"rainha"}


@pytest.mark.asyncio
async def test_first_level_is_capped(sequential_engine) -> None:
    builder = _builder(StubProvider(GRAPH_VECTORS), sequential_engine, first_level_size=1)
    ranked = await _first_level(builder)

    graph = await builder.build(
        "rei", ranked, vocabulary=GRAPH_VOCABULARY, input_words=["rei"]
    )

    assert [n.id for n in graph.nodes_at("first")] == ["rainha"]
    _assert_well_formed(graph)


@pytest.mark.asyncio
async def test_failed_parent_contributes_nothing(sequential_engine) -> None:
    ranked = await _first_level(_builder(StubProvider(GRAPH_VECTORS), sequential_engine))
    # Fresh cache: the first parent's batch hits the failure, the second retries.
    builder = _builder(StubProvider(GRAPH_VECTORS, fail_once=["sol"]), sequential_engine)

    graph = await builder.build(
        "rei", ranked, vocabulary=GRAPH_VOCABULARY, input_words=["rei"]
    )

    _assert_well_formed(graph)
    second = graph.nodes_at("second")
    assert [n.id for n in second] == ["coroa", "duque"]
    assert {n.parent for n in second} == {"princesa"}


@pytest.mark.asyncio
async def test_second_level_candidates_are_capped(sequential_engine) -> None:
    provider = StubProvider(GRAPH_VECTORS)
    builder = _builder(provider, sequential_engine, max_candidates=2)
    ranked = await _first_level(builder)
    provider.calls.clear()

    graph = await builder.build(
        "rei", ranked, vocabulary=GRAPH_VOCABULARY, input_words=["rei"]
    )

    # Only trono and coroa are considered, so duque never appears.
    assert {n.id for n in graph.nodes_at("second")} == {"trono", "coroa"}
    assert provider.calls == []


@pytest.mark.asyncio
async def test_empty_ranking_yields_central_only(sequential_engine) -> None:
    builder = _builder(StubProvider(GRAPH_VECTORS), sequential_engine)

    graph = await builder.build("xyzzy", [], vocabulary=GRAPH_VOCABULARY, input_words=["xyzzy"])

    assert graph.to_dict() == {
        "nodes": [
            {"id": "xyzzy", "similarity": 1.0, "category": "central", "level": "central", "size": 28.0}
        ],
        "edges": [],
    }
