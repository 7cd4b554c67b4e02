import math
from typing import Sequence


def cosine_similarity(first: Sequence[float], second: Sequence[float]) -> float:
    """
    Cosine of the angle between two embedding vectors.

    Returns a value in [-1, 1], or 0.0 if either vector has zero magnitude.

    Raises:
        ValueError: The vectors differ in length or are empty
    """
    if len(first) != len(second):
        raise ValueError("Embedding vectors must have the same length")
    if not first:
        raise ValueError("Embedding vectors cannot be empty")

    dot = sum(a * b for a, b in zip(first, second))
    magnitude_first = math.sqrt(sum(a * a for a in first))
    magnitude_second = math.sqrt(sum(b * b for b in second))
    if magnitude_first == 0 or magnitude_second == 0:
        return 0.0
    return dot / (magnitude_first * magnitude_second)
