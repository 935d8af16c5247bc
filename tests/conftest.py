from __future__ import annotations

from unittest.mock import Mock

import pytest

from searchconsole.services.search_gateway import GatewayConfig, SearchGateway


@pytest.fixture
def config():
    return GatewayConfig(base_url="http://engine:9200", default_index="news_quansu")


@pytest.fixture
def engine():
    """Stand-in for the opensearch-py client."""
    return Mock()


@pytest.fixture
def gateway(config, engine):
    return SearchGateway(config, client=engine)


@pytest.fixture
def search_response():
    return {
        "took": 3,
        "hits": {
            "total": {"value": 2, "relation": "eq"},
            "max_score": 42.5,
            "hits": [
                {
                    "_index": "news_quansu",
                    "_id": "a1",
                    "_score": 42.5,
                    "_source": {"title": "An ninh biển Đông", "source": "vnexpress"},
                    "highlight": {"title": ["<mark>An ninh</mark> biển Đông"]},
                },
                {
                    "_index": "news_quansu",
                    "_id": "b2",
                    "_score": 3.25,
                    "_source": {"title": "Tin quốc phòng", "source": "qdnd"},
                },
            ],
        },
        "aggregations": {
            "source": {"buckets": [{"key": "vnexpress", "doc_count": 1}, {"key": "qdnd", "doc_count": 1}]},
            "category": {"buckets": []},
        },
    }
