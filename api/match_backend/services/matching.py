from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from .. import repo
from ..errors import MissingProfile, UserNotFound
from ..traits import TraitProfile, coerce_trait_profile
from .vector import cosine_similarity, vectorize

logger = logging.getLogger(__name__)


@dataclass
class RankedCandidate:
    candidate_id: int
    name: str
    bio: str | None
    score: float


def build_candidate_set(requester: dict[str, Any], rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Community members the requester may still be shown.

    Only the requester's own likes exclude a candidate; having been liked by
    a candidate does not.
    """
    requester_id = requester["id"]
    community_id = requester.get("community_id")
    out: list[dict[str, Any]] = []
    for row in rows:
        if row.get("id") == requester_id:
            continue
        if community_id is not None and row.get("community_id", community_id) != community_id:
            continue
        if row.get("liked_by_requester"):
            continue
        if row.get("trait_profile") is None:
            continue
        out.append(row)
    return out


def rank_candidates(
    requester_profile: TraitProfile,
    candidates: list[dict[str, Any]],
    limit: int,
) -> list[RankedCandidate]:
    if limit < 1:
        raise ValueError("limit must be a positive integer")

    requester_vector = vectorize(requester_profile)
    scored: list[RankedCandidate] = []
    for c in candidates:
        profile = coerce_trait_profile(c.get("trait_profile"))
        if profile is None:
            continue
        scored.append(
            RankedCandidate(
                candidate_id=c["id"],
                name=c.get("name") or "",
                bio=c.get("bio"),
                score=cosine_similarity(requester_vector, vectorize(profile)),
            )
        )

    scored.sort(key=lambda x: (-x.score, x.candidate_id))
    return scored[:limit]


def find_compatible_users(db, requester_id: int, limit: int) -> list[dict[str, Any]]:
    requester = repo.get_user_by_id(db, requester_id)
    if not requester:
        raise UserNotFound()
    requester_profile = coerce_trait_profile(requester.get("trait_profile"))
    if requester_profile is None:
        raise MissingProfile()

    rows = repo.fetch_community_candidates(db, requester_id, requester["community_id"])
    candidates = build_candidate_set(requester, rows)
    ranked = rank_candidates(requester_profile, candidates, limit)
    logger.debug(
        "[matching] requester=%s community=%s fetched=%d eligible=%d returned=%d",
        requester_id,
        requester["community_id"],
        len(rows),
        len(candidates),
        len(ranked),
    )
    return [asdict(r) for r in ranked]
