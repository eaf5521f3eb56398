"""In-process metrics registry and service instrumentation."""
