"""API routers for all endpoints."""

from goalpulse.routers import evaluation

__all__ = [
    "evaluation",
]
