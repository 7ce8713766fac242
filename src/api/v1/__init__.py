"""Account Lifecycle API, version 1."""

from src.api.v1.routes import router

__all__ = ["router"]
