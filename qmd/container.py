import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    """Lazily builds the services of one knowledge base.

    Every service is created on first resolve and cached for the life of
    the container. ``close()`` releases the ones holding resources (the
    SQLite connection) in reverse creation order.
    """

    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _instances: dict[type, Any] = field(default_factory=dict)

    def register(self, interface: type[T], factory: Callable[[], T]) -> None:
        """Register factory for interface.

        Args:
            interface: Type used as the lookup key.
            factory: Builds the instance on first resolve.

        Raises:
            ValueError: If the interface was already resolved.
        """
        if interface in self._instances:
            raise ValueError(f"{interface.__name__} is already in use")
        self._factories[interface] = factory

    def resolve(self, interface: type[T]) -> T:
        if interface in self._instances:
            return self._instances[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface.__name__}")

        instance = self._factories[interface]()
        self._instances[interface] = instance
        logger.debug(f"Created {type(instance).__name__} for {interface.__name__}")
        return instance

    def close(self) -> None:
        """Close resolved services that own resources, newest first."""
        for instance in reversed(list(self._instances.values())):
            close = getattr(instance, "close", None)
            if callable(close):
                close()
        self._instances.clear()

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def configure_container(settings: Settings) -> Container:
    """Build a container wired from settings.

    Each call returns a fresh container, so one process can host several
    knowledge bases (or tests) without sharing a store handle.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .core.chunking import TextChunker
    from .core.protocols.document_source import DocumentSourceProtocol
    from .core.protocols.document_store import DocumentStoreProtocol
    from .core.services.ingest_service import IngestService
    from .core.services.knowledge_base import KnowledgeBase
    from .core.services.search_service import SearchService
    from .core.strategies.fusion import ReciprocalRankFusion
    from .infrastructure.document_loaders import FileSystemSource
    from .infrastructure.embeddings.openrouter import build_embedding_capability
    from .infrastructure.stores.sqlite_store import SqliteStore

    container = Container()

    container.register(
        DocumentStoreProtocol,
        lambda: SqliteStore(settings.db_path),
    )

    capability = build_embedding_capability(settings)

    container.register(
        DocumentSourceProtocol,
        lambda: FileSystemSource(settings.kb_path, pattern=settings.file_pattern),
    )

    container.register(
        TextChunker,
        lambda: TextChunker(settings.chunk_size, settings.chunk_overlap),
    )

    container.register(
        IngestService,
        lambda: IngestService(
            store=container.resolve(DocumentStoreProtocol),
            embeddings=capability,
            source=container.resolve(DocumentSourceProtocol),
            chunker=container.resolve(TextChunker),
        ),
    )

    container.register(
        SearchService,
        lambda: SearchService(
            store=container.resolve(DocumentStoreProtocol),
            embeddings=capability,
            fusion=ReciprocalRankFusion(k=settings.rrf_k),
            fetch_multiplier=settings.fusion_fetch_multiplier,
        ),
    )

    container.register(
        KnowledgeBase,
        lambda: KnowledgeBase(
            store=container.resolve(DocumentStoreProtocol),
            ingest_service=container.resolve(IngestService),
            search_service=container.resolve(SearchService),
            source=container.resolve(DocumentSourceProtocol),
            default_limit=settings.search_limit,
        ),
    )

    logger.info("Container configured")
    return container
