"""Embedding capability: either a configured embedder or a reason it is absent.

Services take an ``EmbeddingCapability`` instead of an optional embedder so
every call site has to handle the lexical-only case.
"""
from dataclasses import dataclass
from typing import Union

from .exceptions import ProviderUnavailable
from .protocols.embedder import EmbedderProtocol


@dataclass(frozen=True)
class Configured:
    embedder: EmbedderProtocol

    def is_available(self) -> bool:
        return True

    def require(self) -> EmbedderProtocol:
        return self.embedder

    @property
    def model_name(self) -> str:
        return self.embedder.model_name


@dataclass(frozen=True)
class Unconfigured:
    reason: str = "OPENROUTER_API_KEY not configured"

    def is_available(self) -> bool:
        return False

    def require(self) -> EmbedderProtocol:
        raise ProviderUnavailable(self.reason)

    @property
    def model_name(self) -> str:
        return ""


EmbeddingCapability = Union[Configured, Unconfigured]
