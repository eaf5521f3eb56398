"""Infrastructure adapters: cache, search index, persistence and messaging."""
