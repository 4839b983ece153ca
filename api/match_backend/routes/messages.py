from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from .. import repo
from ..auth.deps import get_current_user
from ..config import MESSAGE_MAX_LENGTH
from ..deps import get_db
from ..schemas import SendMessageRequest
from ..services.messaging import is_participant, read_match_thread, send_message
from ..services.rate_limit import MESSAGE_POLICY, rate_limited

router = APIRouter()

RL_MESSAGE = rate_limited(MESSAGE_POLICY)


@router.post("/messages", status_code=201, dependencies=[RL_MESSAGE])
def create_message(payload: SendMessageRequest, current_user: dict[str, Any] = Depends(get_current_user), db=Depends(get_db)) -> dict[str, Any]:
    body = payload.text.strip()
    if not body:
        raise HTTPException(status_code=400, detail="Message body required")
    if len(body) > MESSAGE_MAX_LENGTH:
        raise HTTPException(status_code=400, detail="Message too long")
    message = send_message(db, current_user["id"], payload.receiver_id, body)
    db.commit()
    return {"message": message}


@router.get("/messages/unread")
def unread_counts(current_user: dict[str, Any] = Depends(get_current_user), db=Depends(get_db)) -> dict[str, Any]:
    matches = repo.unread_counts_by_match(db, current_user["id"])
    return {"total_unread": sum(m["unread_count"] for m in matches), "matches": matches}


@router.get("/messages/match/{match_id}")
def get_match_messages(match_id: int, current_user: dict[str, Any] = Depends(get_current_user), db=Depends(get_db)) -> dict[str, Any]:
    match = repo.get_match_by_id(db, match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    if not is_participant(match, current_user["id"]):
        raise HTTPException(status_code=403, detail="Not authorized to view these messages")
    messages = read_match_thread(db, match, current_user["id"])
    db.commit()
    return {"messages": messages}


@router.put("/messages/{message_id}/read")
def mark_read(message_id: int, current_user: dict[str, Any] = Depends(get_current_user), db=Depends(get_db)) -> dict[str, Any]:
    message = repo.get_message(db, message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    if message["receiver_id"] != current_user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to mark this message as read")
    repo.mark_messages_read(db, [message_id])
    db.commit()
    message["read"] = True
    return {"message": message}
