"""API route modules."""

from insight_engine.api.routes import health, tasks

__all__ = ["health", "tasks"]
