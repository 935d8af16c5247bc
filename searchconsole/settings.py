from __future__ import annotations

import os
from pathlib import Path
from dataclasses import dataclass
from dotenv import load_dotenv

# Load variables from .env.example first (as defaults), then .env to override
project_root = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=project_root / ".env.example", override=False)
load_dotenv(dotenv_path=project_root / ".env", override=True)


def _getenv(key: str, default: str | None = None) -> str | None:
    v = os.getenv(key, default)
    return v


@dataclass
class Settings:
    app_env: str = _getenv("APP_ENV", "development") or "development"
    log_level: str = (_getenv("LOG_LEVEL", "INFO") or "INFO").upper()
    page_size: int = int(_getenv("PAGE_SIZE", "50") or 50)

    # Search engine (Elasticsearch-compatible REST API)
    es_base_url: str = (_getenv("ELASTIC_API", "http://localhost:9200") or "http://localhost:9200").rstrip("/")
    es_index: str = _getenv("ELASTIC_INDEX", "news_quansu") or "news_quansu"
    es_username: str | None = _getenv("ELASTIC_USERNAME") or None
    es_password: str | None = _getenv("ELASTIC_PASSWORD") or None
    es_timeout: int = int(_getenv("ELASTIC_TIMEOUT", "20") or 20)


settings = Settings()
