"""Security module - token management."""

from core.security.token_cache import InMemoryTokenCache

__all__ = [
    "InMemoryTokenCache",
]
