"""
Error taxonomy for query resolution and similarity computation.
"""

from __future__ import annotations


class ExplorerError(Exception):
    """Base class for word explorer failures."""


class ProviderFailure(ExplorerError):
    """Raised when the embedding provider cannot produce a vector for a text."""

    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"Could not embed {text!r}: {reason}")
        self.text = text
        self.reason = reason


class VectorShapeError(ExplorerError, ValueError):
    """Raised when vectors compared in one operation do not share a length."""


class BackendUnavailable(ExplorerError):
    """Raised when no accelerated compute backend can be initialized."""


class BackendOperationFailure(ExplorerError):
    """Raised when an accelerated computation fails after initialization."""


class QueryError(ExplorerError, ValueError):
    """Raised when a query is rejected before any resolution work."""


class MalformedExpression(QueryError):
    """Raised when an arithmetic query lacks a `word (+|-) word` structure."""
