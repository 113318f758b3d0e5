"""
FastAPI server exposing word search and word arithmetic.

Returns the flat ranked list and the neighbor graph as JSON for a
rendering client; no UI is served.
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .errors import ProviderFailure, QueryError
from .explorer import SemanticExplorer

app = FastAPI(title="WordExplorer", description="Semantic word neighbors and word arithmetic")

_explorer: SemanticExplorer | None = None


def get_explorer() -> SemanticExplorer:
    """Return the module-level explorer, creating one from env settings if needed."""
    global _explorer
    if _explorer is None:
        _explorer = SemanticExplorer.from_env()
    return _explorer


def set_explorer(explorer: SemanticExplorer | None) -> None:
    global _explorer
    _explorer = explorer


def reset_explorer() -> None:
    """Drop the explorer and its embedding cache."""
    set_explorer(None)


class SearchRequest(BaseModel):
    """Request model for single-word search."""

    word: str = Field(description="Word to find neighbors for")
    vocabulary: list[str] | None = Field(
        default=None, description="Optional candidate words replacing the default vocabulary"
    )


class ComputeRequest(BaseModel):
    """Request model for word arithmetic."""

    expression: str = Field(description="Expression such as 'rei - homem + mulher'")
    vocabulary: list[str] | None = None


def _explorer_or_error() -> SemanticExplorer | JSONResponse:
    try:
        return get_explorer()
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=503)


@app.post("/api/search")
async def search(request: SearchRequest):
    """Rank the vocabulary against a single word."""
    explorer = _explorer_or_error()
    if isinstance(explorer, JSONResponse):
        return explorer
    try:
        result = await explorer.search(request.word, vocabulary=request.vocabulary)
    except QueryError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except ProviderFailure as exc:
        return JSONResponse({"error": str(exc)}, status_code=502)
    return result.to_dict()


@app.post("/api/compute")
async def compute(request: ComputeRequest):
    """Evaluate word arithmetic and rank the vocabulary against the result."""
    explorer = _explorer_or_error()
    if isinstance(explorer, JSONResponse):
        return explorer
    try:
        result = await explorer.compute(request.expression, vocabulary=request.vocabulary)
    except QueryError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except ProviderFailure as exc:
        return JSONResponse({"error": str(exc)}, status_code=502)
    return result.to_dict()


@app.get("/api/latest")
async def latest():
    """Return the most recent non-stale result, if any."""
    explorer = _explorer_or_error()
    if isinstance(explorer, JSONResponse):
        return explorer
    if explorer.latest is None:
        return JSONResponse({"error": "No query has completed yet"}, status_code=404)
    return explorer.latest.to_dict()


@app.get("/api/categories")
async def categories():
    """List categories, their display colors and vocabulary statistics."""
    explorer = _explorer_or_error()
    if isinstance(explorer, JSONResponse):
        return explorer
    model = explorer.categories
    return {
        "categories": [
            {
                "name": category.name,
                "weight": category.weight,
                "words": list(category.words),
                "related": list(category.related),
            }
            for category in model.categories
        ],
        "colors": model.colors(),
        "stats": model.stats(),
    }


@app.get("/api/engine")
async def engine_status():
    """Report the active similarity strategy and cache usage."""
    explorer = _explorer_or_error()
    if isinstance(explorer, JSONResponse):
        return explorer
    return {
        "engine": explorer.engine.describe().to_dict(),
        "cache": {
            "entries": len(explorer.cache),
            "hits": explorer.cache.hits,
            "misses": explorer.cache.misses,
        },
    }


def run_server(host: str = "127.0.0.1", port: int = 8000):
    """Run the FastAPI server."""
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
