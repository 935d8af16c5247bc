from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Union

# Relevance priority of the tiered query: phrase > exact > no-accent > fuzzy
EXACT_BOOST = 10
PHRASE_BOOST = 15
NO_ACCENT_BOOST = 7.5
FUZZY_BOOST = 2
PHRASE_SLOP = 2

TEXT_FIELDS = ["title^5", "body"]
PHRASE_FIELDS = ["title^10", "body^2"]
NO_ACCENT_FIELDS = ["title.no_accent^5", "body.no_accent"]

DateLike = Union[str, date]


class SearchMethod(str, Enum):
    MULTI_MATCH = "multi_match"
    BOOLEAN_AND = "boolean_and"
    BOOLEAN_OR = "boolean_or"
    QUERY_STRING = "query_string"
    MATCH_PHRASE = "match_phrase"
    WILDCARD = "wildcard"


@dataclass(frozen=True)
class SearchRequest:
    query: Optional[str] = None
    index: Optional[str] = None
    source: Optional[str] = None
    category: Optional[str] = None
    from_date: Optional[DateLike] = None
    to_date: Optional[DateLike] = None
    from_: Optional[int] = None
    size: Optional[int] = None

    @classmethod
    def of(cls, text: str) -> "SearchRequest":
        """Plain keyword search with no filters."""
        return cls(query=text)

    @property
    def text(self) -> str:
        return (self.query or "").strip()


def _date_value(value: DateLike) -> str:
    # Strings go out as given; the engine validates the format.
    if isinstance(value, date):
        return value.isoformat()
    return value


def _tiered_clause(text: str) -> Dict[str, Any]:
    should: List[Dict[str, Any]] = [
        {
            "multi_match": {
                "query": text,
                "fields": list(TEXT_FIELDS),
                "operator": "or",
                "boost": EXACT_BOOST,
            }
        },
        {
            "multi_match": {
                "query": text,
                "fields": list(PHRASE_FIELDS),
                "type": "phrase",
                "slop": PHRASE_SLOP,
                "boost": PHRASE_BOOST,
            }
        },
        {
            "multi_match": {
                "query": text,
                "fields": list(NO_ACCENT_FIELDS),
                "operator": "or",
                "boost": NO_ACCENT_BOOST,
            }
        },
        {
            "multi_match": {
                "query": text,
                "fields": list(TEXT_FIELDS),
                "fuzziness": "AUTO",
                "boost": FUZZY_BOOST,
            }
        },
    ]
    return {"bool": {"should": should, "minimum_should_match": 1}}


def _method_clause(text: str, method: SearchMethod) -> Dict[str, Any]:
    fields = list(TEXT_FIELDS)
    if method is SearchMethod.MULTI_MATCH:
        return {"multi_match": {"query": text, "fields": fields, "type": "best_fields", "fuzziness": "AUTO"}}
    if method is SearchMethod.BOOLEAN_AND:
        return {"multi_match": {"query": text, "fields": fields, "operator": "and"}}
    if method is SearchMethod.BOOLEAN_OR:
        return {"multi_match": {"query": text, "fields": fields, "operator": "or"}}
    if method is SearchMethod.QUERY_STRING:
        return {"query_string": {"query": text, "fields": fields, "default_operator": "or"}}
    if method is SearchMethod.MATCH_PHRASE:
        return {"multi_match": {"query": text, "fields": fields, "type": "phrase"}}
    # wildcard: * and ? inside terms
    return {"query_string": {"query": text, "fields": fields, "analyze_wildcard": True}}


def _filter_clauses(request: SearchRequest) -> List[Dict[str, Any]]:
    filters: List[Dict[str, Any]] = []
    if request.source:
        filters.append({"term": {"source": request.source}})
    if request.category:
        filters.append({"term": {"category": request.category}})
    if request.from_date or request.to_date:
        bounds: Dict[str, str] = {}
        if request.from_date:
            bounds["gte"] = _date_value(request.from_date)
        if request.to_date:
            bounds["lte"] = _date_value(request.to_date)
        filters.append({"range": {"publish_date": bounds}})
    return filters


def build_search_query(request: SearchRequest) -> Dict[str, Any]:
    """Build the boosted query tree for ``request``.

    The first ``must`` element is ``match_all`` when there is no query text,
    otherwise a ``bool.should`` group of four weighted strategies (exact,
    phrase, accent-insensitive, fuzzy) of which at least one has to match.
    Term and date-range filters follow, one per field present on the request.
    """
    text = request.text
    root = _tiered_clause(text) if text else {"match_all": {}}
    must = [root] + _filter_clauses(request)
    return {"bool": {"must": must}}


def build_method_query(request: SearchRequest, method: SearchMethod) -> Dict[str, Any]:
    """Same layout as :func:`build_search_query` with a single matching strategy."""
    text = request.text
    root = _method_clause(text, SearchMethod(method)) if text else {"match_all": {}}
    must = [root] + _filter_clauses(request)
    return {"bool": {"must": must}}
