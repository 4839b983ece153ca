from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .. import repo
from ..traits import TraitProfile
from .trait_extractor import extract_traits_from_bio

logger = logging.getLogger(__name__)

_UNSET = object()


def profile_for_bio(bio: str | None, extractor: Callable[[str | None], TraitProfile] = extract_traits_from_bio) -> dict[str, Any] | None:
    """Stored trait profile for a bio: None without a bio, otherwise the extracted traits."""
    if bio is None or not bio.strip():
        return None
    return extractor(bio).to_dict()


def update_user_profile(
    db,
    user_id: int,
    *,
    name: str | None = None,
    email: str | None = None,
    password_hash: str | None = None,
    bio: Any = _UNSET,
    extractor: Callable[[str | None], TraitProfile] = extract_traits_from_bio,
) -> dict[str, Any] | None:
    """Apply a profile update. A bio change recomputes the trait profile in the same write."""
    fields: dict[str, Any] = {}
    if name:
        fields["name"] = name
    if email:
        fields["email"] = email
    if password_hash:
        fields["password_hash"] = password_hash
    if bio is not _UNSET:
        text_bio = (bio or "").strip() or None
        fields["bio"] = text_bio
        fields["trait_profile"] = profile_for_bio(text_bio, extractor)
        logger.info("[profiles] user=%s bio updated; trait profile %s", user_id, "recomputed" if text_bio else "cleared")
    return repo.update_user(db, user_id, fields)
