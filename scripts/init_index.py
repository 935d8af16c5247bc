from __future__ import annotations

import os
import sys

CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from searchconsole.services.index_schema import news_index_mappings, news_index_settings
from searchconsole.services.search_gateway import get_gateway


def main():
    gateway = get_gateway()
    if not gateway.ping():
        print("Search engine not reachable. Ensure it's running at the configured ELASTIC_API.")
        return
    index = gateway.config.default_index
    if index in gateway.list_indices():
        print(f"Index already exists: {index}")
        return
    if gateway.create_index(index, news_index_settings(), news_index_mappings()):
        print(f"Index created: {index}")
    else:
        print(f"Could not create index: {index}")


if __name__ == "__main__":
    main()
