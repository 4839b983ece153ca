from __future__ import annotations

from typing import Any

from .. import repo
from ..errors import InvalidSelfReference, NotMatched


def send_message(db, sender_id: int, receiver_id: int, body: str) -> dict[str, Any]:
    """Store a message between two users. A match between them is required."""
    if sender_id == receiver_id:
        raise InvalidSelfReference("Cannot send a message to yourself")
    match = repo.get_match_for_pair(db, sender_id, receiver_id)
    if not match:
        raise NotMatched()
    return repo.create_message(db, match_id=match["id"], sender_id=sender_id, receiver_id=receiver_id, body=body)


def read_match_thread(db, match: dict[str, Any], reader_id: int) -> list[dict[str, Any]]:
    """Messages of a match, oldest first; those addressed to the reader are marked read."""
    messages = repo.list_match_messages(db, match["id"])
    unread = [m["id"] for m in messages if m["receiver_id"] == reader_id and not m["read"]]
    if unread:
        repo.mark_messages_read(db, unread)
        for m in messages:
            if m["id"] in unread:
                m["read"] = True
    return messages


def is_participant(match: dict[str, Any], user_id: int) -> bool:
    return user_id in {match["user_a_id"], match["user_b_id"]}


def other_participant(match: dict[str, Any], user_id: int) -> int:
    return match["user_b_id"] if match["user_a_id"] == user_id else match["user_a_id"]
