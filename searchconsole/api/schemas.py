from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional

from ..services.query_builder import SearchMethod, SearchRequest


class SearchRequestIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: Optional[str] = Field(default=None, description="Free text query")
    index: Optional[str] = Field(default=None, description="Index to search, defaults to the configured one")
    source: Optional[str] = Field(default=None, description="Exact source filter")
    category: Optional[str] = Field(default=None, description="Exact category filter")
    from_date: Optional[str] = Field(default=None, description="YYYY-MM-DD, inclusive")
    to_date: Optional[str] = Field(default=None, description="YYYY-MM-DD, inclusive")
    from_: int = Field(default=0, ge=0, alias="from")
    size: Optional[int] = Field(default=None, ge=0, le=10000)
    method: Optional[SearchMethod] = Field(default=None, description="Single-strategy search instead of the tiered one")

    def to_request(self) -> SearchRequest:
        return SearchRequest(
            query=self.query,
            index=self.index,
            source=self.source,
            category=self.category,
            from_date=self.from_date,
            to_date=self.to_date,
            from_=self.from_,
            size=self.size,
        )


class ExplainRequestIn(SearchRequestIn):
    document_id: str
    index_name: str


class HitOut(BaseModel):
    index_name: str
    document_id: str
    relevance_score: float
    source: Dict[str, Any] = Field(default_factory=dict)
    highlight: Dict[str, List[str]] = Field(default_factory=dict)


class SearchResponse(BaseModel):
    total: int
    hits: List[HitOut]
    aggregations: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)


class CreateIndexIn(BaseModel):
    name: str = Field(min_length=1)
    settings: Optional[Dict[str, Any]] = None
    mappings: Optional[Dict[str, Any]] = None


class OkResponse(BaseModel):
    ok: bool
