"""API Routes Package."""

from api.routes import archive, health

__all__ = [
    "archive",
    "health",
]
