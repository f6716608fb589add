"""Vector similarity and embedding blob encoding."""
from typing import Sequence

import numpy as np

from .exceptions import VectorDimensionMismatch


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity between two vectors of equal length.

    Returns 0.0 when either vector has zero norm. That value is a clamp to
    avoid dividing by zero, not a real cosine.

    Raises:
        VectorDimensionMismatch: If the vectors differ in length.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise VectorDimensionMismatch(len(va), len(vb))

    denominator = np.linalg.norm(va) * np.linalg.norm(vb)
    if denominator == 0:
        return 0.0

    # Rounding can push parallel vectors a hair past 1
    return float(np.clip(np.dot(va, vb) / denominator, -1.0, 1.0))


def vector_to_blob(vector: Sequence[float]) -> bytes:
    """Encode as little-endian float32 bytes."""
    return np.asarray(vector, dtype="<f4").tobytes()


def blob_to_vector(blob: bytes) -> list[float]:
    return np.frombuffer(blob, dtype="<f4").astype(float).tolist()
