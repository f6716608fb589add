import logging
from abc import ABC, abstractmethod
from dataclasses import replace

from ..models.document import MatchType, SearchResult

logger = logging.getLogger(__name__)


class FusionStrategy(ABC):
    """Base class for merging ranked result lists."""

    @abstractmethod
    def fuse(
        self, lexical: list[SearchResult], vector: list[SearchResult]
    ) -> list[SearchResult]:
        """Merge two ranked lists into one, best first."""
        ...


class ReciprocalRankFusion(FusionStrategy):
    """Reciprocal Rank Fusion: score = sum of 1 / (k + rank + 1) over lists.

    Ties are broken by first-seen order, lexical list before vector list.
    """

    def __init__(self, k: int = 60):
        """Initialize strategy.

        Args:
            k: Smoothing constant; larger values flatten the top-rank advantage.
        """
        if k < 0:
            raise ValueError(f"k must not be negative, got {k}")
        self.k = k

    def fuse(
        self, lexical: list[SearchResult], vector: list[SearchResult]
    ) -> list[SearchResult]:
        # dict keeps insertion order, which is the tie-break order
        fused: dict[int, tuple[float, SearchResult]] = {}

        for results in (lexical, vector):
            for rank, result in enumerate(results):
                contribution = 1.0 / (self.k + rank + 1)
                if result.chunk_id in fused:
                    score, first = fused[result.chunk_id]
                    merged = first
                    if first.match_type != result.match_type:
                        merged = replace(first, match_type=MatchType.HYBRID)
                    fused[result.chunk_id] = (score + contribution, merged)
                else:
                    fused[result.chunk_id] = (contribution, result)

        ranked = sorted(fused.values(), key=lambda item: item[0], reverse=True)

        hybrid = sum(1 for _, r in ranked if r.match_type == MatchType.HYBRID)
        logger.debug(
            f"RRF: {len(lexical)} lexical + {len(vector)} vector -> "
            f"{len(ranked)} fused ({hybrid} in both)"
        )

        return [replace(result, score=score) for score, result in ranked]
