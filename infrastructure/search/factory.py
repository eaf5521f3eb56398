"""Search index factory.

Environment-based adapter selection:
- SEARCH_BACKEND=elasticsearch: ELASTICSEARCH_URL
- SEARCH_BACKEND=inmemory: process-local index (default, tests/dev)
"""

import os

from domain.recipe.core.ports.search_index import ISearchIndex
from infrastructure.config import get_elasticsearch_url
from infrastructure.search.in_memory_index import InMemorySearchIndex


def create_search_index() -> ISearchIndex:
    """Create search index based on SEARCH_BACKEND env var.

    Raises:
        ValueError: Unknown backend name
    """
    mode = os.getenv("SEARCH_BACKEND", "inmemory").lower()

    if mode == "elasticsearch":
        from elasticsearch import AsyncElasticsearch

        from infrastructure.search.elasticsearch_index import ElasticsearchSearchIndex

        return ElasticsearchSearchIndex(AsyncElasticsearch(get_elasticsearch_url()))

    if mode == "inmemory":
        return InMemorySearchIndex()

    raise ValueError(
        f"Unknown SEARCH_BACKEND: {mode!r} (expected 'inmemory' or 'elasticsearch')"
    )
