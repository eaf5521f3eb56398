"""Recipe bounded context."""
