"""Domain exceptions."""


class QmdError(Exception):
    """Base class for knowledge base errors."""


class ProviderUnavailable(QmdError):
    """Raised when embeddings are requested but no provider is configured."""

    def __init__(self, reason: str = "OPENROUTER_API_KEY not configured"):
        self.reason = reason
        super().__init__(f"Embeddings not available: {reason}")


class ProviderError(QmdError):
    """Raised when an embedding call fails (transport, quota, bad response)."""

    def __init__(self, message: str, model: str = "", batch_start: int = 0):
        self.message = message
        self.model = model
        self.batch_start = batch_start
        super().__init__(
            f"Embedding request failed (model={model}, batch at {batch_start}): {message}"
        )


class StoreError(QmdError):
    """Raised when a database operation fails."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"Store error during {operation}: {message}")


class VectorDimensionMismatch(QmdError):
    """Raised when comparing embeddings of different lengths.

    Usually means the embedding model changed after the corpus was indexed;
    re-run ingestion with force to rebuild stored vectors.
    """

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Vector dimension mismatch: {expected} vs {actual}")
