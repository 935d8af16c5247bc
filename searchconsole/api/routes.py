from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from .schemas import CreateIndexIn, ExplainRequestIn, HitOut, OkResponse, SearchRequestIn, SearchResponse
from ..services.search_gateway import SearchGateway, get_gateway

router = APIRouter()


@router.get("/healthz")
async def healthz(gateway: SearchGateway = Depends(get_gateway)):
    if not gateway.ping():
        return JSONResponse({"status": "down"}, status_code=503)
    return {"status": "ok"}


@router.post("/api/search", response_model=SearchResponse)
def search(payload: SearchRequestIn, gateway: SearchGateway = Depends(get_gateway)):
    result = gateway.search(payload.to_request(), method=payload.method)
    return SearchResponse(
        total=result.total,
        hits=[HitOut(**asdict(h)) for h in result.hits],
        aggregations=result.aggregations,
    )


@router.post("/api/explain")
def explain(payload: ExplainRequestIn, gateway: SearchGateway = Depends(get_gateway)):
    explanation = gateway.explain(payload.to_request(), payload.document_id, payload.index_name)
    return {"document_id": payload.document_id, "explanation": explanation}


@router.get("/api/count")
def count(gateway: SearchGateway = Depends(get_gateway)):
    return {"count": gateway.count_all()}


@router.get("/api/indices")
def list_indices(gateway: SearchGateway = Depends(get_gateway)):
    return {"indices": gateway.list_indices()}


@router.post("/api/indices", response_model=OkResponse)
def create_index(payload: CreateIndexIn, gateway: SearchGateway = Depends(get_gateway)):
    ok = gateway.create_index(payload.name.strip(), payload.settings, payload.mappings)
    return OkResponse(ok=ok)


@router.get("/api/indices/{index}")
def index_details(index: str, gateway: SearchGateway = Depends(get_gateway)):
    details = gateway.get_index_details(index)
    if details is None:
        raise HTTPException(status_code=404, detail=f"Index {index} not found")
    return details


@router.delete("/api/indices/{index}", response_model=OkResponse)
def delete_index(index: str, gateway: SearchGateway = Depends(get_gateway)):
    return OkResponse(ok=gateway.delete_index(index))


@router.get("/api/indices/{index}/documents")
def list_documents(index: str, gateway: SearchGateway = Depends(get_gateway)):
    hits = gateway.list_documents_by_index(index)
    return {"hits": [asdict(h) for h in hits]}


@router.post("/api/indices/{index}/bulk", response_model=OkResponse)
def bulk_upload(
    index: str,
    documents: List[Dict[str, Any]] = Body(...),
    gateway: SearchGateway = Depends(get_gateway),
):
    return OkResponse(ok=gateway.bulk_upsert(index, documents))


@router.put("/api/indices/{index}/documents/{doc_id}", response_model=OkResponse)
def upsert_document(
    index: str,
    doc_id: str,
    document: Dict[str, Any] = Body(...),
    gateway: SearchGateway = Depends(get_gateway),
):
    return OkResponse(ok=gateway.upsert_document(doc_id, document, index=index))


@router.delete("/api/indices/{index}/documents/{doc_id}", response_model=OkResponse)
def delete_document(index: str, doc_id: str, gateway: SearchGateway = Depends(get_gateway)):
    return OkResponse(ok=gateway.delete_document(index, doc_id))
