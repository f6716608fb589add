"""Embedding provider implementations."""
from .openrouter import OpenRouterEmbedder, build_embedding_capability

__all__ = ["OpenRouterEmbedder", "build_embedding_capability"]
