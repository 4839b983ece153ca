from __future__ import annotations

import math
from collections.abc import Hashable, Mapping
from typing import NamedTuple

from ..traits import TraitProfile


PERSONALITY = "personality"
INTEREST = "interest"
VALUE = "value"


class FeatureKey(NamedTuple):
    kind: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind}:{self.name}"


ComparisonVector = dict[FeatureKey, float]


def vectorize(profile: TraitProfile) -> ComparisonVector:
    vector: ComparisonVector = {}
    for name, intensity in profile.personality_traits.items():
        vector[FeatureKey(PERSONALITY, name)] = float(intensity)
    for keyword in profile.interests:
        vector[FeatureKey(INTEREST, keyword)] = 1.0
    for keyword in profile.values:
        vector[FeatureKey(VALUE, keyword)] = 1.0
    return vector


def cosine_similarity(vector_a: Mapping[Hashable, float], vector_b: Mapping[Hashable, float]) -> float:
    """Cosine similarity over the union of both vectors' keys.

    Missing keys count as 0.0. If either vector has zero norm the result is
    0.0. Weights are non-negative, so the result lies in [0, 1].
    """
    products: list[float] = []
    squares_a: list[float] = []
    squares_b: list[float] = []
    for key in set(vector_a) | set(vector_b):
        a = float(vector_a.get(key, 0.0))
        b = float(vector_b.get(key, 0.0))
        products.append(a * b)
        squares_a.append(a * a)
        squares_b.append(b * b)

    # fsum is exactly rounded, so key iteration order cannot break symmetry.
    dot = math.fsum(products)
    norm_a = math.fsum(squares_a)
    norm_b = math.fsum(squares_b)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def user_similarity(profile_a: TraitProfile, profile_b: TraitProfile) -> float:
    return cosine_similarity(vectorize(profile_a), vectorize(profile_b))
