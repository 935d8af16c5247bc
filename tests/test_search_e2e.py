from __future__ import annotations

import pytest

from searchconsole.services.index_schema import news_index_mappings, news_index_settings
from searchconsole.services.query_builder import SearchRequest
from searchconsole.services.search_gateway import get_gateway
import uuid


@pytest.mark.skipif(not get_gateway().ping(), reason="Search engine not reachable")
def test_search_flow():
    gateway = get_gateway()
    test_index = f"test-{uuid.uuid4()}"
    assert gateway.create_index(test_index, news_index_settings(), news_index_mappings())
    try:
        docs = [
            {
                "id": "1",
                "title": "Tàu ngầm Kilo tham gia diễn tập",
                "body": "Lực lượng hải quân tổ chức diễn tập trên biển.",
                "source": "qdnd",
                "category": "quan-su",
                "publish_date": "2024-05-01",
            },
            {
                "id": "2",
                "title": "Giá xăng giảm nhẹ",
                "body": "Thị trường năng lượng ổn định.",
                "source": "vnexpress",
                "category": "kinh-te",
                "publish_date": "2024-05-02",
            },
        ]
        assert gateway.bulk_upsert(test_index, docs)
        gateway.client.indices.refresh(index=test_index)

        res = gateway.search(SearchRequest(query="tau ngam", index=test_index))
        assert res.total >= 1
        assert res.hits[0].document_id == "1"

        filtered = gateway.search(SearchRequest(index=test_index, source="vnexpress"))
        assert [h.document_id for h in filtered.hits] == ["2"]
        assert test_index in gateway.list_indices()
    finally:
        gateway.delete_index(test_index)
