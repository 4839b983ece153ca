"""
Mutual-like detection and match lifecycle for a pair of users.

Callers run each operation inside one session transaction and commit once,
so the like row and the match row change together. The unique constraint on
the canonical pair is the backstop against two concurrent likes both
creating a match.
"""
from __future__ import annotations

import logging
from typing import Any

from .. import repo
from ..errors import CrossCommunity, InvalidSelfReference, LikeAlreadyExists, LikeNotFound, UserNotFound
from .state_machine import MATCHED, MUTUAL_LIKE, pair_state, transition_pair

logger = logging.getLogger(__name__)


def _require_distinct(user_a_id: int, user_b_id: int) -> None:
    if user_a_id == user_b_id:
        raise InvalidSelfReference()


def current_pair_state(db, user_a_id: int, user_b_id: int) -> str:
    return pair_state(
        repo.get_like(db, user_a_id, user_b_id) is not None,
        repo.get_like(db, user_b_id, user_a_id) is not None,
        repo.get_match_for_pair(db, user_a_id, user_b_id) is not None,
    )


def resolve_after_like(db, user_a_id: int, user_b_id: int) -> dict[str, Any] | None:
    """Return the pair's match when both users like each other, creating it if absent."""
    _require_distinct(user_a_id, user_b_id)
    state = current_pair_state(db, user_a_id, user_b_id)
    if state == MATCHED:
        return repo.get_match_for_pair(db, user_a_id, user_b_id)
    if state != MUTUAL_LIKE:
        return None

    if repo.insert_match(db, user_a_id, user_b_id):
        logger.info("[reciprocity] match created users=%s,%s", *repo.canonical_pair(user_a_id, user_b_id))
    else:
        logger.info("[reciprocity] match already created concurrently users=%s,%s", *repo.canonical_pair(user_a_id, user_b_id))
    return repo.get_match_for_pair(db, user_a_id, user_b_id)


def resolve_after_unlike(db, user_a_id: int, user_b_id: int) -> dict[str, bool]:
    """Delete the pair's match, if any. Called after one directed like was removed."""
    _require_distinct(user_a_id, user_b_id)
    match = repo.get_match_for_pair(db, user_a_id, user_b_id)
    if not match:
        return {"match_deleted": False}
    deleted = repo.delete_match(db, match["id"])
    if deleted:
        logger.info("[reciprocity] match %s deleted after unlike users=%s,%s", match["id"], user_a_id, user_b_id)
    return {"match_deleted": deleted}


def record_like(db, from_user: dict[str, Any], to_user_id: int) -> dict[str, Any] | None:
    """Create a directed like and resolve the pair. Returns the match, if one now exists."""
    from_user_id = int(from_user["id"])
    _require_distinct(from_user_id, to_user_id)

    to_user = repo.get_user_by_id(db, to_user_id)
    if not to_user:
        raise UserNotFound()
    if to_user["community_id"] != from_user["community_id"]:
        raise CrossCommunity("Cannot like users from different communities")

    before = current_pair_state(db, from_user_id, to_user_id)
    if repo.create_like(db, from_user_id, to_user_id) is None:
        raise LikeAlreadyExists()
    logger.debug("[reciprocity] like %s->%s state %s -> %s", from_user_id, to_user_id, before, transition_pair(before, "like"))
    return resolve_after_like(db, from_user_id, to_user_id)


def remove_like(db, from_user_id: int, to_user_id: int) -> dict[str, bool]:
    _require_distinct(from_user_id, to_user_id)
    if not repo.delete_like(db, from_user_id, to_user_id):
        raise LikeNotFound()
    return resolve_after_unlike(db, from_user_id, to_user_id)
