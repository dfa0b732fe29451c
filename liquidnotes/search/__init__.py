"""Search module combining the query language, result cache and semantic ranking."""

from liquidnotes.search.cache import QueryCache
from liquidnotes.search.orchestrator import SearchOrchestrator

__all__ = [
    "QueryCache",
    "SearchOrchestrator",
]
