"""Rank fusion strategies."""
from .fusion import FusionStrategy, ReciprocalRankFusion

__all__ = [
    "FusionStrategy",
    "ReciprocalRankFusion",
]
