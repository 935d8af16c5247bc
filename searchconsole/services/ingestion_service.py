from __future__ import annotations

import logging
from typing import Iterable, Dict, Any, List, Optional, Set
from datetime import datetime, timezone

from .search_gateway import SearchGateway, document_id_of


log = logging.getLogger(__name__)


def validate_doc_shape(doc: Dict[str, Any]) -> Dict[str, Any]:
    # Minimal normalization and defaults
    out = dict(doc)
    out.setdefault("language", "vi")
    out.setdefault("ingested_at", datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"))
    if not out.get("title"):
        raise ValueError("Missing required field: title")
    return out


def run_and_index(
    source_iter: Iterable[Dict[str, Any]],
    gateway: SearchGateway,
    index_name: Optional[str] = None,
    batch_size: int = 500,
) -> Dict[str, Any]:
    index = index_name or gateway.config.default_index
    batch: List[Dict[str, Any]] = []
    seen_ids: Set[Any] = set()
    indexed = 0
    failed_batches = 0

    def flush() -> None:
        nonlocal indexed, failed_batches
        if gateway.bulk_upsert(index, list(batch)):
            indexed += len(batch)
        else:
            failed_batches += 1
            log.warning("Batch of %d documents was not fully indexed into %s", len(batch), index)
        batch.clear()

    for doc in source_iter:
        clean = validate_doc_shape(doc)
        doc_id = document_id_of(clean)
        if doc_id is not None:
            if doc_id in seen_ids:
                continue
            seen_ids.add(doc_id)
        batch.append(clean)
        if len(batch) >= batch_size:
            flush()
    if batch:
        flush()
    return {"indexed": indexed, "failed_batches": failed_batches}
