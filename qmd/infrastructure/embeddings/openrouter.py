import logging
from typing import Optional

import httpx
from openai import OpenAI, OpenAIError

from qmd.config.settings import Settings
from qmd.core.capability import Configured, EmbeddingCapability, Unconfigured
from qmd.core.exceptions import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_DIMENSIONS = 1536

MODEL_DIMENSIONS = {
    "openai/text-embedding-3-small": 1536,
    "openai/text-embedding-3-large": 3072,
    "cohere/embed-english-v3.0": 1024,
    "cohere/embed-multilingual-v3.0": 1024,
}


class OpenRouterEmbedder:
    """Embeddings through OpenRouter's OpenAI-compatible /embeddings API."""

    def __init__(
        self,
        api_key: str,
        model: str = "openai/text-embedding-3-small",
        base_url: str = "https://openrouter.ai/api/v1",
        app_name: str = "QMD Knowledge Base",
        batch_size: int = 100,
        http_client: Optional[httpx.Client] = None,
    ):
        """Initialize embedder.

        Args:
            api_key: OpenRouter API key.
            model: Embedding model identifier.
            base_url: API base URL.
            app_name: Sent as X-Title for OpenRouter attribution.
            batch_size: Maximum texts per request.
            http_client: Custom httpx client (tests, proxies).
        """
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        self._model = model
        self._batch_size = batch_size
        # Retry policy belongs to callers
        self._client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            max_retries=0,
            default_headers={
                "HTTP-Referer": "https://github.com/qmd",
                "X-Title": app_name,
            },
            http_client=http_client,
        )

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return MODEL_DIMENSIONS.get(self._model, DEFAULT_DIMENSIONS)

    def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        results: list[list[float]] = []
        for start in range(0, len(texts), self._batch_size):
            batch = texts[start : start + self._batch_size]
            results.extend(self._embed_batch(batch, start))

        logger.debug(f"Embedded {len(results)} texts with {self._model}")
        return results

    def embed_single(self, text: str) -> list[float]:
        return self.embed([text])[0]

    def _embed_batch(self, batch: list[str], start: int) -> list[list[float]]:
        try:
            response = self._client.embeddings.create(
                model=self._model,
                input=batch,
                encoding_format="float",
            )
        except OpenAIError as e:
            logger.error(f"Error generating embeddings for batch {start}: {e}")
            raise ProviderError(str(e), model=self._model, batch_start=start) from e

        # OpenRouter reports some upstream failures as 200 with an error body
        data = getattr(response, "data", None)
        if data is None:
            error = getattr(response, "error", None) or "no embeddings in response"
            logger.error(f"Provider returned no embeddings for batch {start}: {error}")
            raise ProviderError(str(error), model=self._model, batch_start=start)

        if len(data) != len(batch):
            raise ProviderError(
                f"expected {len(batch)} embeddings, got {len(data)}",
                model=self._model,
                batch_start=start,
            )

        try:
            # Providers may answer out of order
            ordered = sorted(data, key=lambda item: item.index)
            return [list(item.embedding) for item in ordered]
        except (AttributeError, TypeError) as e:
            raise ProviderError(
                f"malformed embedding response: {e}", model=self._model, batch_start=start
            ) from e


def build_embedding_capability(
    settings: Settings, http_client: Optional[httpx.Client] = None
) -> EmbeddingCapability:
    """Build the embedder if an API key is configured.

    Args:
        settings: Application settings.
        http_client: Custom httpx client.

    Returns:
        Configured embedder, or Unconfigured when no key is set.
    """
    if not settings.openrouter_api_key:
        logger.warning("OPENROUTER_API_KEY not set. Embeddings will not be generated.")
        return Unconfigured("OPENROUTER_API_KEY not configured")

    embedder = OpenRouterEmbedder(
        api_key=settings.openrouter_api_key,
        model=settings.embedding_model,
        base_url=settings.openrouter_base_url,
        app_name=settings.openrouter_app_name,
        batch_size=settings.embedding_batch_size,
        http_client=http_client,
    )
    logger.info(f"Embeddings enabled: {settings.embedding_model}")
    return Configured(embedder)
