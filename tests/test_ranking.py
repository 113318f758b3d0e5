"""Tests for the category table and the adjusted-similarity ranking."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from word_explorer.categories import Category, CategoryModel
from word_explorer.ranking import RankingEngine


@pytest.fixture()
def model() -> CategoryModel:
    return CategoryModel()


@pytest.fixture()
def ranking(model: CategoryModel) -> RankingEngine:
    return RankingEngine(model)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def test_professions_are_recognized(model: CategoryModel) -> None:
    assert model.category_of("médico").name == "profissões"
    assert model.category_of("médica").name == "profissões"


def test_unknown_word_is_general(model: CategoryModel) -> None:
    assert model.category_of("xyzzy") == ("general", 1.0)


def test_lookup_is_case_insensitive(model: CategoryModel) -> None:
    assert model.category_of("  REI ") == ("realeza", 2.0)


def test_first_declared_category_wins(model: CategoryModel) -> None:
    # "amor" is related to família and a canonical emoções word.
    assert model.category_of("amor").name == "família"
    # "poder" is related to realeza and a canonical abstratos word.
    assert model.category_of("poder").name == "realeza"


def test_vocabulary_is_unique_and_ordered(model: CategoryModel) -> None:
    vocabulary = model.vocabulary()

    assert vocabulary[:3] == ["rei", "rainha", "príncipe"]
    assert len(vocabulary) == len(set(vocabulary))
    assert "vida" in vocabulary
    assert model.stats()["unique_words"] == len(vocabulary)
    assert model.stats()["total_words"] > len(vocabulary)


def test_colors_cover_every_category(model: CategoryModel) -> None:
    colors = model.colors()
    assert set(colors) == {c.name for c in model.categories} | {"general"}


def test_custom_table_from_json(tmp_path: Path) -> None:
    path = tmp_path / "categories.json"
    path.write_text(
        json.dumps(
            {
                "frutas": {"weight": 1.2, "words": ["Maçã", "banana"], "related": ["pomar"]},
                "cores": {"words": ["azul"]},
            }
        ),
        encoding="utf-8",
    )

    custom = CategoryModel.from_json(path)

    assert custom.category_of("maçã") == ("frutas", 1.2)
    assert custom.category_of("pomar").name == "frutas"
    assert custom.category_of("azul") == ("cores", 1.0)
    assert custom.vocabulary() == ["maçã", "banana", "pomar", "azul"]


def test_invalid_tables_are_rejected() -> None:
    with pytest.raises(ValueError):
        CategoryModel([Category("general", 1.0, ("a",))])
    with pytest.raises(ValueError):
        CategoryModel([Category("a", 1.0, ("x",)), Category("a", 1.0, ("y",))])
    with pytest.raises(ValueError):
        CategoryModel.from_mapping({"frutas": {"weight": 1.0}})


# ---------------------------------------------------------------------------
# Adjustment
# ---------------------------------------------------------------------------


def test_same_category_gets_bonus(ranking: RankingEngine) -> None:
    assert ranking.adjust("rei", "rainha", 0.8) == pytest.approx(0.88)


def test_general_words_never_get_bonus(ranking: RankingEngine) -> None:
    assert ranking.adjust("xyzzy", "plugh", 0.8) == pytest.approx(0.8)


def test_different_categories_get_no_bonus(ranking: RankingEngine) -> None:
    assert ranking.adjust("rei", "sol", 0.8) == pytest.approx(0.8)


def test_long_length_gap_is_penalized(ranking: RankingEngine) -> None:
    # len("ar") == 2, len("farmacêutica") == 12
    assert ranking.adjust("ar", "farmacêutica", 0.8) == pytest.approx(0.72)
    # A gap of exactly 8 is not penalized.
    assert ranking.adjust("ar", "abcdefghij", 0.8) == pytest.approx(0.8)


def test_adjusted_similarity_is_not_clamped(ranking: RankingEngine) -> None:
    assert ranking.adjust("rei", "rainha", 0.99) == pytest.approx(1.089)
    assert ranking.adjust("rei", "rainha", 0.99) > 1.0


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------


WORDS = ["rainha", "sol", "lua", "trono", "mesa", "chuva"]
RAW = [0.70, 0.55, 0.40, 0.52, 0.90, 0.55]


def test_rank_filters_sorts_and_truncates(ranking: RankingEngine) -> None:
    ranked = ranking.rank("rei", WORDS, RAW, threshold=0.5, top_k=3)

    assert [c.word for c in ranked] == ["mesa", "rainha", "trono"]
    assert ranked[1].adjusted_similarity == pytest.approx(0.77)
    assert ranked[1].cosine == pytest.approx(0.70)
    assert ranked[1].category == "realeza"
    assert ranked[0].category == "objetos"


def test_rank_properties_hold(ranking: RankingEngine) -> None:
    ranked = ranking.rank("rei", WORDS, RAW, threshold=0.5, top_k=12)

    scores = [c.adjusted_similarity for c in ranked]
    assert scores == sorted(scores, reverse=True)
    assert all(score >= 0.5 for score in scores)
    assert len(ranked) <= 12
    assert "lua" not in {c.word for c in ranked}


def test_rank_ties_keep_candidate_order(ranking: RankingEngine) -> None:
    ranked = ranking.rank("xyzzy", ["sol", "chuva", "lua"], [0.6, 0.6, 0.6])
    assert [c.word for c in ranked] == ["sol", "chuva", "lua"]


def test_rank_rejects_misaligned_inputs(ranking: RankingEngine) -> None:
    with pytest.raises(ValueError):
        ranking.rank("rei", ["sol", "lua"], [0.5])


def test_fallback_relaxes_threshold_when_primary_is_empty(ranking: RankingEngine) -> None:
    words = [f"palavra{i}" for i in range(12)]
    raw = [0.31 + i * 0.01 for i in range(12)]

    assert ranking.rank("xyzzy", words, raw, threshold=0.5) == []
    outcome = ranking.rank_with_fallback("xyzzy", words, raw)

    assert outcome.degraded is True
    assert len(outcome.candidates) == 10
    assert outcome.candidates[0].word == "palavra11"
    assert all(c.adjusted_similarity >= 0.3 for c in outcome.candidates)


def test_fallback_not_used_when_primary_has_results(ranking: RankingEngine) -> None:
    outcome = ranking.rank_with_fallback("rei", WORDS, RAW)
    assert outcome.degraded is False
    assert len(outcome.candidates) == 5


def test_fallback_can_still_be_empty(ranking: RankingEngine) -> None:
    outcome = ranking.rank_with_fallback("xyzzy", ["sol"], [0.1])
    assert outcome.degraded is True
    assert outcome.candidates == []
