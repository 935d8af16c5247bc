from __future__ import annotations

import functools
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from opensearchpy import OpenSearch
from opensearchpy.exceptions import ConnectionError as EngineConnectionError
from opensearchpy.exceptions import SerializationError, TransportError
from opensearchpy.serializer import JSONSerializer

from ..settings import Settings, settings
from .query_builder import SearchMethod, SearchRequest, build_method_query, build_search_query


log = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 50
BUCKET_SIZE = 50
INDEX_BROWSE_SIZE = 100
JSON_HEADERS = {"Content-Type": "application/json"}
NDJSON_HEADERS = {"Content-Type": "application/x-ndjson"}


class SearchGatewayError(Exception):
    """Engine call failed; ``str(exc)`` is the human-readable reason."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def error_reason(status: Any, body: Any) -> str:
    """Turn an error response into a message: ``error.reason``, else ``error``, else the status."""
    fallback = f"Request failed: {status}"
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError:
            return f"{fallback} - {body}" if body else fallback
    if not isinstance(body, dict):
        return fallback
    err = body.get("error")
    if isinstance(err, dict) and err.get("reason"):
        return str(err["reason"])
    if isinstance(err, str) and err:
        return err
    if err:
        return json.dumps(err)
    return fallback


def _gateway_error(exc: TransportError) -> SearchGatewayError:
    if isinstance(exc, EngineConnectionError):
        return SearchGatewayError(f"Connection failed: {exc.error}")
    status = exc.status_code if isinstance(exc.status_code, int) else None
    return SearchGatewayError(error_reason(exc.status_code, exc.info), status_code=status)


def degrades_to(default: Any) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Swallow :class:`SearchGatewayError` and return ``default`` instead.

    Operations wrapped with this cannot tell an empty answer from a failed
    call. Removing the decorator turns them into raising operations.
    """

    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return fn(*args, **kwargs)
            except SearchGatewayError as exc:
                log.warning("%s failed, returning %r: %s", fn.__name__, default, exc)
                # Fresh copy so callers never share a mutable default
                return type(default)() if isinstance(default, (list, dict)) else default

        return wrapper

    return decorator


@dataclass(frozen=True)
class GatewayConfig:
    base_url: str = "http://localhost:9200"
    default_index: str = "news_quansu"
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: int = 20

    @classmethod
    def from_settings(cls, s: Settings) -> "GatewayConfig":
        return cls(
            base_url=s.es_base_url,
            default_index=s.es_index,
            username=s.es_username,
            password=s.es_password,
            timeout=s.es_timeout,
        )

    @property
    def auth(self) -> Optional[tuple]:
        if self.username and self.password:
            return (self.username, self.password)
        return None


@dataclass
class Hit:
    index_name: str
    document_id: str
    relevance_score: float
    source: Dict[str, Any] = field(default_factory=dict)
    highlight: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "Hit":
        return cls(
            index_name=raw.get("_index", ""),
            document_id=str(raw.get("_id", "")),
            relevance_score=float(raw.get("_score") or 0.0),
            source=raw.get("_source") or {},
            highlight=raw.get("highlight") or {},
        )


@dataclass
class SearchResult:
    hits: List[Hit] = field(default_factory=list)
    total: int = 0
    aggregations: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)

    @classmethod
    def from_response(cls, resp: Dict[str, Any]) -> "SearchResult":
        hits_block = resp.get("hits", {}) or {}
        total = hits_block.get("total", 0)
        # Older engines report a bare integer
        if isinstance(total, dict):
            total = total.get("value", 0)
        aggs = {
            name: (agg or {}).get("buckets", [])
            for name, agg in (resp.get("aggregations") or {}).items()
        }
        return cls(
            hits=[Hit.from_raw(h) for h in hits_block.get("hits", [])],
            total=int(total or 0),
            aggregations=aggs,
        )


def build_search_body(
    request: SearchRequest,
    method: Optional[SearchMethod] = None,
    default_size: int = DEFAULT_PAGE_SIZE,
) -> Dict[str, Any]:
    query = build_method_query(request, method) if method else build_search_query(request)
    return {
        "query": query,
        "from": request.from_ or 0,
        "size": request.size if request.size is not None else default_size,
        "sort": [
            {"_score": {"order": "desc"}},
            {"publish_date": {"order": "desc", "missing": "_last"}},
        ],
        "highlight": {
            "pre_tags": ["<mark>"],
            "post_tags": ["</mark>"],
            "fields": {
                "title": {"number_of_fragments": 0},
                "body": {"fragment_size": 150, "number_of_fragments": 3},
            },
        },
        "aggs": {
            "source": {"terms": {"field": "source", "size": BUCKET_SIZE}},
            "category": {"terms": {"field": "category", "size": BUCKET_SIZE}},
        },
    }


def document_id_of(doc: Dict[str, Any]) -> Optional[Any]:
    """``id`` field, else ``_id``; ``None`` when the document carries neither."""
    if doc.get("id") is not None:
        return doc["id"]
    return doc.get("_id")


def build_bulk_body(
    index: str,
    documents: Iterable[Dict[str, Any]],
    serializer: Optional[JSONSerializer] = None,
) -> str:
    # Same encoder the client uses for single-document writes (dates, decimals, uuids)
    serializer = serializer or JSONSerializer()
    lines: List[str] = []
    for doc in documents:
        doc_id = document_id_of(doc)
        action: Dict[str, Any] = {"_index": index}
        if doc_id is not None:
            action["_id"] = str(doc_id)
        source = {k: v for k, v in doc.items() if k != "_id"}
        lines.append(serializer.dumps({"index": action}))
        lines.append(serializer.dumps(source))
    return "\n".join(lines) + "\n"


def create_engine_client(config: GatewayConfig) -> OpenSearch:
    return OpenSearch(
        hosts=[config.base_url],
        http_compress=True,
        http_auth=config.auth,
        headers=JSON_HEADERS,
        verify_certs=False,
        ssl_assert_hostname=False,
        ssl_show_warn=False,
        timeout=config.timeout,
    )


class SearchGateway:
    """Pass-through client for the search engine REST API.

    ``search``, ``explain``, ``delete_document`` and ``list_documents_by_index``
    raise :class:`SearchGatewayError`. The remaining operations fall back to
    an empty value on failure (see :func:`degrades_to`).
    """

    def __init__(self, config: GatewayConfig, client: Optional[OpenSearch] = None) -> None:
        self.config = config
        self.client = client if client is not None else create_engine_client(config)

    def _call(self, name: str, fn: Callable[..., T], **kwargs: Any) -> T:
        log.debug("engine call %s %s", name, {k: v for k, v in kwargs.items() if k != "body"})
        try:
            return fn(**kwargs)
        except TransportError as exc:
            raise _gateway_error(exc) from exc
        except SerializationError as exc:
            raise SearchGatewayError(f"Could not encode request: {exc}") from exc

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except Exception:
            return False

    def search(self, request: SearchRequest, method: Optional[SearchMethod] = None) -> SearchResult:
        index = request.index or self.config.default_index
        body = build_search_body(request, method=method)
        resp = self._call("search", self.client.search, index=index, body=body)
        return SearchResult.from_response(resp)

    def explain(self, request: SearchRequest, document_id: str, index_name: str) -> Dict[str, Any]:
        body = {"query": build_search_query(request)}
        resp = self._call("explain", self.client.explain, index=index_name, id=document_id, body=body)
        return resp.get("explanation") or {}

    @degrades_to(0)
    def count_all(self) -> int:
        resp = self._call("count", self.client.transport.perform_request, method="GET", url="/_count")
        count = resp.get("count") if isinstance(resp, dict) else None
        return count if isinstance(count, int) else 0

    @degrades_to([])
    def list_indices(self) -> List[str]:
        rows = self._call("cat.indices", self.client.cat.indices, format="json")
        if not isinstance(rows, list):
            return []
        return sorted(row["index"] for row in rows if row.get("index"))

    @degrades_to(False)
    def create_index(
        self,
        index_name: str,
        index_settings: Optional[Dict[str, Any]] = None,
        mappings: Optional[Dict[str, Any]] = None,
    ) -> bool:
        body: Dict[str, Any] = {}
        if index_settings:
            body["settings"] = index_settings
        if mappings:
            body["mappings"] = mappings
        self._call("indices.create", self.client.indices.create, index=index_name, body=body or None)
        log.info("Created index %s", index_name)
        return True

    @degrades_to(False)
    def delete_index(self, index_name: str) -> bool:
        self._call("indices.delete", self.client.indices.delete, index=index_name)
        log.info("Deleted index %s", index_name)
        return True

    @degrades_to(False)
    def upsert_document(self, document_id: str, body: Dict[str, Any], index: Optional[str] = None) -> bool:
        target = index or self.config.default_index
        self._call("index", self.client.index, index=target, id=document_id, body=body)
        return True

    def delete_document(self, index_name: str, document_id: str) -> bool:
        self._call("delete", self.client.delete, index=index_name, id=document_id)
        return True

    def list_documents_by_index(self, index_name: str) -> List[Hit]:
        body = {"query": {"match_all": {}}, "size": INDEX_BROWSE_SIZE}
        resp = self._call("search", self.client.search, index=index_name, body=body)
        return [Hit.from_raw(h) for h in resp.get("hits", {}).get("hits", [])]

    @degrades_to(None)
    def get_index_details(self, index_name: str) -> Optional[Dict[str, Any]]:
        resp = self._call("indices.get", self.client.indices.get, index=index_name)
        return resp.get(index_name) or None

    @degrades_to(False)
    def bulk_upsert(self, index_name: str, documents: List[Dict[str, Any]]) -> bool:
        try:
            payload = build_bulk_body(index_name, documents)
        except SerializationError as exc:
            raise SearchGatewayError(f"Could not encode documents: {exc}") from exc
        resp = self._call("bulk", self.client.bulk, body=payload, headers=NDJSON_HEADERS)
        if resp.get("errors"):
            log.warning("Bulk upload to %s reported item errors", index_name)
            return False
        return True


_gateway: Optional[SearchGateway] = None


def get_gateway() -> SearchGateway:
    global _gateway
    if _gateway is not None:
        return _gateway
    _gateway = SearchGateway(GatewayConfig.from_settings(settings))
    return _gateway
