import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from .. import repo
from ..auth.security import create_access_token, hash_password, verify_password
from ..deps import get_db, get_trait_extractor
from ..schemas import LoginRequest, RegisterRequest
from ..services.profiles import profile_for_bio

logger = logging.getLogger(__name__)

router = APIRouter()


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _token_response(user: dict[str, Any]) -> dict[str, Any]:
    return {
        "access_token": create_access_token(user["id"], user["email"], user["community_id"]),
        "token_type": "bearer",
        "user": {
            "id": user["id"],
            "email": user["email"],
            "name": user["name"],
            "bio": user.get("bio"),
            "community_id": user["community_id"],
        },
    }


@router.post("/register", status_code=201)
def register(payload: RegisterRequest, db=Depends(get_db), extractor=Depends(get_trait_extractor)) -> dict[str, Any]:
    email = _normalize_email(payload.email)
    if not repo.get_community_by_id(db, payload.community_id):
        raise HTTPException(status_code=404, detail="Community not found")

    bio = (payload.bio or "").strip() or None
    user = repo.create_user(
        db,
        email=email,
        password_hash=hash_password(payload.password),
        name=payload.name.strip(),
        community_id=payload.community_id,
        bio=bio,
        trait_profile=profile_for_bio(bio, extractor),
    )
    if not user:
        raise HTTPException(status_code=400, detail="Email already registered")
    db.commit()
    logger.info("[auth] registered user_id=%s community_id=%s", user["id"], user["community_id"])
    return _token_response(user)


@router.post("/login")
def login(payload: LoginRequest, db=Depends(get_db)) -> dict[str, Any]:
    creds = repo.get_user_credentials(db, _normalize_email(payload.email))
    if not creds or not verify_password(payload.password, creds["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    user = repo.get_user_by_id(db, creds["id"])
    return _token_response(user)
