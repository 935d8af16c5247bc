from __future__ import annotations

import json
import logging
import os
import sys
from typing import Dict, Iterator

CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from searchconsole.services.ingestion_service import run_and_index
from searchconsole.services.search_gateway import get_gateway
from searchconsole.settings import settings


def iter_documents(path: str) -> Iterator[Dict]:
    """Read a JSON array, or one JSON object per line."""
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    stripped = text.lstrip()
    if stripped.startswith("["):
        yield from json.loads(stripped)
        return
    for line in text.splitlines():
        line = line.strip()
        if line:
            yield json.loads(line)


def main():
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(message)s")
    if len(sys.argv) < 2:
        print("usage: upload_documents.py FILE [INDEX]")
        sys.exit(2)
    path = sys.argv[1]
    index = sys.argv[2] if len(sys.argv) > 2 else None
    batch_size = int(os.getenv("UPLOAD_BATCH_SIZE", "200"))
    res = run_and_index(iter_documents(path), get_gateway(), index_name=index, batch_size=batch_size)
    print(f"Indexed: {res['indexed']} (failed batches: {res['failed_batches']})")


if __name__ == "__main__":
    main()
