"""
Parsing and evaluation of word arithmetic such as ``rei - homem + mulher``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Sequence

import numpy as np

from .cache import Vector, as_vector
from .errors import MalformedExpression
from .resolver import ensure_uniform_length


Operator = Literal["+", "-"]

_OPERATOR_SPLIT_RE = re.compile(r"\s*([+-])\s*")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ExpressionTerm:
    word: str
    operator: Operator | None = None


def parse_expression(expression: str) -> list[ExpressionTerm]:
    """Split *expression* into terms; the first term has no operator.

    At least one ``+`` or ``-`` is required, and every operand must be
    non-empty.
    """
    tokens = _OPERATOR_SPLIT_RE.split(_WHITESPACE_RE.sub(" ", expression.strip()))
    if len(tokens) < 3:
        raise MalformedExpression(
            f"Invalid expression {expression!r}: use 'word1 + word2' or 'word1 - word2'"
        )

    first = tokens[0].strip()
    if not first:
        raise MalformedExpression(f"Invalid expression {expression!r}: missing first word")

    terms = [ExpressionTerm(word=first)]
    for index in range(1, len(tokens), 2):
        operator = tokens[index]
        word = tokens[index + 1].strip() if index + 1 < len(tokens) else ""
        if not word:
            raise MalformedExpression(
                f"Invalid expression {expression!r}: operator {operator!r} has no operand"
            )
        terms.append(ExpressionTerm(word=word, operator=operator))  # type: ignore[arg-type]
    return terms


def input_words(terms: Sequence[ExpressionTerm]) -> list[str]:
    """Lower-cased operand words, in expression order."""
    return [term.word.lower() for term in terms]


def combine_vectors(terms: Sequence[ExpressionTerm], vectors: Sequence[Vector]) -> Vector:
    """Add or subtract *vectors* per term and normalize to unit length.

    A zero result stays the zero vector.
    """
    if len(terms) != len(vectors) or not vectors:
        raise ValueError("Need exactly one vector per expression term")
    ensure_uniform_length(vectors)

    result = np.array(vectors[0], dtype=np.float64)
    for term, vector in zip(terms[1:], vectors[1:]):
        if term.operator == "+":
            result = result + vector
        else:
            result = result - vector

    magnitude = float(np.linalg.norm(result))
    if magnitude > 0:
        result = result / magnitude
    return as_vector(result)
