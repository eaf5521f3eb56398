"""Search index adapters."""

from infrastructure.search.in_memory_index import InMemorySearchIndex

__all__ = ["InMemorySearchIndex"]
