from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any


TRAITS_VERSION = 1


@dataclass(frozen=True)
class TraitProfile:
    """Structured traits derived from a user's bio.

    A trait missing from ``personality_traits`` is unknown, not zero.
    """

    personality_traits: dict[str, float] = field(default_factory=dict)
    interests: frozenset[str] = frozenset()
    values: frozenset[str] = frozenset()

    def is_empty(self) -> bool:
        return not self.personality_traits and not self.interests and not self.values

    def to_dict(self) -> dict[str, Any]:
        return {
            "traits_version": TRAITS_VERSION,
            "personality_traits": dict(sorted(self.personality_traits.items())),
            "interests": sorted(self.interests),
            "values": sorted(self.values),
        }


def default_profile() -> TraitProfile:
    return TraitProfile()


def _intensity(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        v = float(value)
    elif isinstance(value, str):
        try:
            v = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(v) or math.isinf(v):
        return None
    return min(1.0, max(0.0, v))


def _keyword(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    k = " ".join(value.split()).lower()
    return k or None


def _keywords(values: Any) -> frozenset[str]:
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple, set, frozenset)):
        return frozenset()
    out: set[str] = set()
    for item in values:
        k = _keyword(item)
        if k:
            out.add(k)
    return frozenset(out)


def coerce_trait_profile(raw: Any) -> TraitProfile | None:
    """Build a TraitProfile from stored JSON or an extractor payload.

    Accepts snake_case (storage) and camelCase (extractor) field names.
    Intensities are clamped to [0, 1]; non-numeric ones are dropped as unknown.
    Returns None when there is no profile at all.
    """
    if raw is None:
        return None
    if isinstance(raw, TraitProfile):
        return raw
    if not isinstance(raw, dict):
        return None

    personality_raw = raw.get("personality_traits", raw.get("personalityTraits")) or {}
    personality: dict[str, float] = {}
    if isinstance(personality_raw, dict):
        for name, value in personality_raw.items():
            key = _keyword(name)
            intensity = _intensity(value)
            if key is None or intensity is None:
                continue
            personality[key] = intensity

    return TraitProfile(
        personality_traits=personality,
        interests=_keywords(raw.get("interests")),
        values=_keywords(raw.get("values")),
    )
