"""
Authentication dependencies for FastAPI.

Bearer tokens only: the Authorization header carries the access token issued
by /auth/login or /auth/register. The user's community is always read from
the user record, never trusted from the token.
"""

import logging
import uuid
from typing import Any

from fastapi import Depends, Header, HTTPException

from .. import repo
from ..deps import get_db
from .security import decode_access_token

logger = logging.getLogger(__name__)


def _unauthorized(reason: str, message: str = "Authentication required") -> HTTPException:
    trace_id = str(uuid.uuid4())
    logger.warning("[auth] failure reason=%s trace_id=%s", reason, trace_id)
    return HTTPException(status_code=401, detail={"message": message, "trace_id": trace_id})


def _extract_bearer(authorization: str | None) -> str:
    if not authorization:
        raise _unauthorized("missing_token")
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise _unauthorized("malformed_token", "Invalid Authorization header")
    return parts[1].strip()


def get_current_user(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db=Depends(get_db),
) -> dict[str, Any]:
    token = _extract_bearer(authorization)
    try:
        payload = decode_access_token(token)
    except HTTPException as exc:
        if exc.status_code != 401:
            raise
        raise _unauthorized("token_expired" if "expired" in str(exc.detail).lower() else "signature_invalid", str(exc.detail))

    try:
        user_id = int(payload.get("sub", ""))
    except (TypeError, ValueError):
        raise _unauthorized("token_missing_subject")

    user = repo.get_user_by_id(db, user_id)
    if not user:
        raise _unauthorized("token_user_not_found")

    logger.debug("[auth] user_id=%s community_id=%s", user_id, user["community_id"])
    return user
