"""Domain layer for the recipe matching service.

Entities, value objects, messages and ports, decoupled from the REST
surface and from the storage/search/queue adapters.
"""
