"""API Package - FastAPI routes, middleware, and dependencies.

Components:
- routes: API endpoint routers (health, generate)
- middleware: request logging with correlation ids
- gate: request admission (shape and readiness)
- streaming: response adapters (JSON, SSE, UI message stream)
- errors: exception handlers
- deps: FastAPI dependency injection functions

Note: Import routers directly from src.api.routes to avoid circular imports.
"""

__all__ = ["routes", "middleware", "deps", "errors", "gate", "streaming"]
