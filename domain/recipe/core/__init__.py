"""Recipe core: entities, value objects, events and ports."""
