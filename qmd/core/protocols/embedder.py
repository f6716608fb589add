"""Embedder protocol for dependency injection."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbedderProtocol(Protocol):
    """Protocol for a remote embedding service."""

    @property
    def model_name(self) -> str:
        ...

    @property
    def dimensions(self) -> int:
        """Vector length produced by the configured model."""
        ...

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed texts, preserving input order.

        Args:
            texts: Texts to embed.

        Returns:
            One vector per input text.

        Raises:
            ProviderError: On transport or API failure.
        """
        ...

    def embed_single(self, text: str) -> list[float]:
        """Embed one text."""
        ...
