from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from .. import repo
from ..auth.deps import get_current_user
from ..config import MATCH_LIMIT_DEFAULT, MATCH_LIMIT_MAX
from ..deps import get_db
from ..schemas import LikeRequest
from ..services.matching import find_compatible_users
from ..services.messaging import is_participant, other_participant
from ..services.rate_limit import LIKE_POLICY, rate_limited
from ..services.reciprocity import record_like, remove_like

router = APIRouter()

RL_LIKE = rate_limited(LIKE_POLICY)


def _match_summary(match: dict[str, Any] | None) -> dict[str, Any] | None:
    if not match:
        return None
    return {"id": match["id"], "created_at": match["created_at"]}


@router.get("/matches/potential")
def get_potential_matches(
    limit: int = Query(default=MATCH_LIMIT_DEFAULT),
    current_user: dict[str, Any] = Depends(get_current_user),
    db=Depends(get_db),
) -> dict[str, Any]:
    if limit < 1 or limit > MATCH_LIMIT_MAX:
        raise HTTPException(status_code=400, detail=f"Limit must be between 1 and {MATCH_LIMIT_MAX}")
    return {"matches": find_compatible_users(db, current_user["id"], limit)}


@router.get("/matches")
def list_matches(current_user: dict[str, Any] = Depends(get_current_user), db=Depends(get_db)) -> dict[str, Any]:
    user_id = current_user["id"]
    unread = {r["match_id"]: r["unread_count"] for r in repo.unread_counts_by_match(db, user_id)}
    out = []
    for r in repo.list_matches_for_user(db, user_id):
        last_message = None
        if r.get("last_message_id") is not None:
            last_message = {
                "id": r["last_message_id"],
                "text": r["last_message_text"],
                "created_at": r["last_message_at"],
                "read": bool(r["last_message_read"]),
                "sender_id": r["last_message_sender_id"],
            }
        out.append(
            {
                "match_id": r["match_id"],
                "created_at": r["created_at"],
                "user": {"id": r["other_id"], "name": r["other_name"], "bio": r["other_bio"]},
                "last_message": last_message,
                "unread_count": unread.get(r["match_id"], 0),
            }
        )
    return {"matches": out}


@router.post("/matches/like", status_code=201, dependencies=[RL_LIKE])
def like_user(payload: LikeRequest, current_user: dict[str, Any] = Depends(get_current_user), db=Depends(get_db)) -> dict[str, Any]:
    match = record_like(db, current_user, payload.to_user_id)
    db.commit()
    return {"success": True, "is_match": match is not None, "match": _match_summary(match)}


@router.delete("/matches/like/{user_id}")
def unlike_user(user_id: int, current_user: dict[str, Any] = Depends(get_current_user), db=Depends(get_db)) -> dict[str, Any]:
    result = remove_like(db, current_user["id"], user_id)
    db.commit()
    return {"success": True, **result}


@router.get("/matches/{match_id}")
def get_match(match_id: int, current_user: dict[str, Any] = Depends(get_current_user), db=Depends(get_db)) -> dict[str, Any]:
    match = repo.get_match_by_id(db, match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    if not is_participant(match, current_user["id"]):
        raise HTTPException(status_code=403, detail="Not authorized to view this match")
    other = repo.get_user_by_id(db, other_participant(match, current_user["id"])) or {}
    return {
        "match": {
            "id": match["id"],
            "created_at": match["created_at"],
            "user": {"id": other.get("id"), "name": other.get("name"), "bio": other.get("bio"), "email": other.get("email")},
        }
    }
