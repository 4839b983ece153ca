from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from .. import repo
from ..deps import get_db
from ..schemas import CreateCommunityRequest

router = APIRouter()


@router.get("/communities")
def list_communities(db=Depends(get_db)) -> dict[str, Any]:
    return {"communities": repo.list_communities(db)}


@router.get("/communities/{slug}")
def get_community(slug: str, db=Depends(get_db)) -> dict[str, Any]:
    community = repo.get_community_by_slug(db, slug)
    if not community:
        raise HTTPException(status_code=404, detail="Community not found")
    return {"community": community}


@router.post("/communities", status_code=201)
def create_community(payload: CreateCommunityRequest, db=Depends(get_db)) -> dict[str, Any]:
    community = repo.create_community(db, payload.name.strip(), payload.slug)
    if not community:
        raise HTTPException(status_code=400, detail="Slug already in use")
    db.commit()
    return {"community": community}
