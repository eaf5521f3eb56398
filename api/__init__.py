"""REST API (FastAPI routers, envelopes and error handlers)."""
