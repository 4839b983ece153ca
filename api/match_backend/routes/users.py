from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response

from .. import repo
from ..auth.deps import get_current_user
from ..auth.security import hash_password
from ..deps import get_db, get_trait_extractor
from ..schemas import UpdateUserRequest
from ..services.profiles import update_user_profile

router = APIRouter()


def _public_user(user: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": user["id"],
        "name": user["name"],
        "email": user.get("email"),
        "bio": user.get("bio"),
        "community_id": user.get("community_id"),
        "created_at": user.get("created_at"),
    }


@router.get("/users")
def list_users(current_user: dict[str, Any] = Depends(get_current_user), db=Depends(get_db)) -> dict[str, Any]:
    return {"users": repo.list_community_users(db, current_user["community_id"])}


@router.get("/users/me")
def get_me(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    user = _public_user(current_user)
    user["has_trait_profile"] = current_user.get("trait_profile") is not None
    return {"user": user}


@router.get("/users/{user_id}")
def get_user(user_id: int, current_user: dict[str, Any] = Depends(get_current_user), db=Depends(get_db)) -> dict[str, Any]:
    user = repo.get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user["community_id"] != current_user["community_id"]:
        raise HTTPException(status_code=403, detail="Access denied")
    return {"user": _public_user(user)}


@router.put("/users/me")
def update_me(
    payload: UpdateUserRequest,
    current_user: dict[str, Any] = Depends(get_current_user),
    db=Depends(get_db),
    extractor=Depends(get_trait_extractor),
) -> dict[str, Any]:
    changes = {k for k in payload.model_fields_set if getattr(payload, k) is not None or k == "bio"}
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    kwargs: dict[str, Any] = {
        "name": payload.name.strip() if payload.name else None,
        "email": payload.email.strip().lower() if payload.email else None,
        "password_hash": hash_password(payload.password) if payload.password else None,
        "extractor": extractor,
    }
    if "bio" in changes:
        kwargs["bio"] = payload.bio
    user = update_user_profile(db, current_user["id"], **kwargs)
    if not user:
        raise HTTPException(status_code=400, detail="Email already registered")
    db.commit()
    out = _public_user(user)
    out["has_trait_profile"] = user.get("trait_profile") is not None
    return {"user": out}


@router.delete("/users/me", status_code=204)
def delete_me(current_user: dict[str, Any] = Depends(get_current_user), db=Depends(get_db)) -> Response:
    repo.delete_user(db, current_user["id"])
    db.commit()
    return Response(status_code=204)
