"""Query language: parsing raw search strings and evaluating them against notes."""

from liquidnotes.query.parser import parse_query
from liquidnotes.query.predicate import is_searchable, matches, searchable_text

__all__ = [
    "is_searchable",
    "matches",
    "parse_query",
    "searchable_text",
]
