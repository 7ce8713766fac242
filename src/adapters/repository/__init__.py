"""Repository adapters - Storage implementations."""

from .memory import InMemoryRepository

__all__ = ["InMemoryRepository"]
