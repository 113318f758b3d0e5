"""
Ranking helpers that turn raw cosine similarity into adjusted scores.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .categories import GENERAL_CATEGORY, CategoryModel


logger = logging.getLogger(__name__)

PRIMARY_THRESHOLD = 0.50
PRIMARY_TOP_K = 12
FALLBACK_THRESHOLD = 0.30
FALLBACK_TOP_K = 10


@dataclass(frozen=True)
class Candidate:
    """A word scored against a query during one ranking pass."""

    word: str
    cosine: float
    adjusted_similarity: float
    category: str

    def to_dict(self) -> dict[str, object]:
        return {
            "word": self.word,
            "adjusted_similarity": self.adjusted_similarity,
            "cosine": self.cosine,
            "category": self.category,
        }


@dataclass(frozen=True)
class RankingOutcome:
    candidates: list[Candidate]
    degraded: bool


class RankingEngine:
    """Category-aware re-ranking of cosine similarities."""

    def __init__(
        self,
        categories: CategoryModel,
        *,
        category_bonus: float = 1.1,
        length_penalty: float = 0.9,
        max_length_gap: int = 8,
    ) -> None:
        self.categories = categories
        self.category_bonus = category_bonus
        self.length_penalty = length_penalty
        self.max_length_gap = max_length_gap

    def adjust(self, base_word: str, word: str, raw_cosine: float) -> float:
        # Not clamped: a shared category can push the score above 1.0.
        base_category = self.categories.category_of(base_word).name
        bonus = 1.0
        if base_category != GENERAL_CATEGORY and base_category == self.categories.category_of(word).name:
            bonus = self.category_bonus
        penalty = self.length_penalty if abs(len(base_word) - len(word)) > self.max_length_gap else 1.0
        return raw_cosine * bonus * penalty

    def score(
        self,
        base_word: str,
        candidate_words: Sequence[str],
        raw_similarities: Sequence[float],
    ) -> list[Candidate]:
        """Adjust every candidate, keeping input order."""
        if len(candidate_words) != len(raw_similarities):
            raise ValueError(
                f"Got {len(candidate_words)} words but {len(raw_similarities)} similarities"
            )
        return [
            Candidate(
                word=word,
                cosine=float(raw),
                adjusted_similarity=self.adjust(base_word, word, float(raw)),
                category=self.categories.category_of(word).name,
            )
            for word, raw in zip(candidate_words, raw_similarities)
        ]

    @staticmethod
    def select(
        scored: Sequence[Candidate], *, threshold: float, top_k: int
    ) -> list[Candidate]:
        """Filter by threshold, sort descending (stable) and truncate."""
        kept = [c for c in scored if c.adjusted_similarity >= threshold]
        kept.sort(key=lambda c: -c.adjusted_similarity)
        return kept[: max(top_k, 0)]

    def rank(
        self,
        base_word: str,
        candidate_words: Sequence[str],
        raw_similarities: Sequence[float],
        threshold: float = PRIMARY_THRESHOLD,
        top_k: int = PRIMARY_TOP_K,
    ) -> list[Candidate]:
        scored = self.score(base_word, candidate_words, raw_similarities)
        return self.select(scored, threshold=threshold, top_k=top_k)

    def rank_with_fallback(
        self,
        base_word: str,
        candidate_words: Sequence[str],
        raw_similarities: Sequence[float],
        *,
        threshold: float = PRIMARY_THRESHOLD,
        top_k: int = PRIMARY_TOP_K,
        fallback_threshold: float = FALLBACK_THRESHOLD,
        fallback_top_k: int = FALLBACK_TOP_K,
    ) -> RankingOutcome:
        """Rank, relaxing to the fallback threshold if nothing passes."""
        scored = self.score(base_word, candidate_words, raw_similarities)
        primary = self.select(scored, threshold=threshold, top_k=top_k)
        if primary:
            return RankingOutcome(candidates=primary, degraded=False)

        relaxed = self.select(scored, threshold=fallback_threshold, top_k=fallback_top_k)
        logger.info(
            "No candidates >= %.2f for %r; relaxed to %.2f with %d results",
            threshold,
            base_word,
            fallback_threshold,
            len(relaxed),
        )
        return RankingOutcome(candidates=relaxed, degraded=True)
