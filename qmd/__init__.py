"""Hybrid lexical + semantic search over a markdown knowledge base."""
from typing import Optional

from .config.logging import configure_logging
from .config.settings import Settings
from .container import configure_container
from .core.services.knowledge_base import KnowledgeBase, format_results

__version__ = "0.1.0"


def create_knowledge_base(settings: Optional[Settings] = None) -> KnowledgeBase:
    """Wire a KnowledgeBase from settings (environment / .env by default)."""
    settings = settings or Settings()
    configure_logging(settings)
    return configure_container(settings).resolve(KnowledgeBase)


__all__ = [
    "KnowledgeBase",
    "Settings",
    "create_knowledge_base",
    "format_results",
]
