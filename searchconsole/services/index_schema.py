from __future__ import annotations

from typing import Any, Dict


def news_index_settings() -> Dict[str, Any]:
    return {
        "index": {"number_of_shards": 1, "number_of_replicas": 0},
        "analysis": {
            "analyzer": {
                # "Quân sự" and "quan su" index to the same terms
                "vi_no_accent": {
                    "tokenizer": "standard",
                    "filter": ["lowercase", "asciifolding"],
                }
            }
        },
    }


def news_index_mappings() -> Dict[str, Any]:
    no_accent = {"no_accent": {"type": "text", "analyzer": "vi_no_accent"}}
    return {
        "properties": {
            "id": {"type": "keyword"},
            "title": {"type": "text", "fields": dict(no_accent)},
            "body": {"type": "text", "fields": dict(no_accent)},
            "source": {"type": "keyword"},
            "category": {"type": "keyword"},
            "publish_date": {"type": "date"},
            "url": {"type": "keyword"},
            "language": {"type": "keyword"},
            "ingested_at": {"type": "date"},
        }
    }

