import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError


def canonical_pair(user_a_id: int, user_b_id: int) -> tuple[int, int]:
    return (user_a_id, user_b_id) if user_a_id < user_b_id else (user_b_id, user_a_id)


def _load_json(value: Any) -> Any:
    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return None
    return value


def _user_row(row) -> dict[str, Any] | None:
    if not row:
        return None
    out = dict(row)
    if "trait_profile" in out:
        out["trait_profile"] = _load_json(out["trait_profile"])
    return out


# communities


def create_community(db, name: str, slug: str) -> dict[str, Any] | None:
    try:
        with db.begin_nested():
            row = db.execute(
                text(
                    """
                    INSERT INTO community (name, slug)
                    VALUES (:name, :slug)
                    RETURNING id, name, slug, created_at
                    """
                ),
                {"name": name, "slug": slug},
            ).mappings().first()
    except IntegrityError:
        return None
    return dict(row) if row else None


def get_community_by_id(db, community_id: int) -> dict[str, Any] | None:
    row = db.execute(
        text("SELECT id, name, slug, created_at FROM community WHERE id = :id"),
        {"id": community_id},
    ).mappings().first()
    return dict(row) if row else None


def get_community_by_slug(db, slug: str) -> dict[str, Any] | None:
    row = db.execute(
        text(
            """
            SELECT c.id, c.name, c.slug, c.created_at,
                   (SELECT COUNT(1) FROM user_account ua WHERE ua.community_id = c.id) AS user_count
            FROM community c
            WHERE c.slug = :slug
            """
        ),
        {"slug": slug},
    ).mappings().first()
    return dict(row) if row else None


def list_communities(db) -> list[dict[str, Any]]:
    rows = db.execute(
        text(
            """
            SELECT c.id, c.name, c.slug, c.created_at,
                   (SELECT COUNT(1) FROM user_account ua WHERE ua.community_id = c.id) AS user_count
            FROM community c
            ORDER BY c.id
            """
        )
    ).mappings().all()
    return [dict(r) for r in rows]


# users


def create_user(
    db,
    *,
    email: str,
    password_hash: str,
    name: str,
    community_id: int,
    bio: str | None = None,
    trait_profile: dict[str, Any] | None = None,
) -> dict[str, Any] | None:
    try:
        with db.begin_nested():
            row = db.execute(
                text(
                    """
                    INSERT INTO user_account (email, password_hash, name, bio, trait_profile, community_id)
                    VALUES (:email, :password_hash, :name, :bio, :trait_profile, :community_id)
                    RETURNING id
                    """
                ),
                {
                    "email": email,
                    "password_hash": password_hash,
                    "name": name,
                    "bio": bio,
                    "trait_profile": json.dumps(trait_profile) if trait_profile is not None else None,
                    "community_id": community_id,
                },
            ).mappings().first()
    except IntegrityError:
        return None
    return get_user_by_id(db, int(row["id"])) if row else None


def get_user_by_id(db, user_id: int) -> dict[str, Any] | None:
    row = db.execute(
        text(
            """
            SELECT id, email, name, bio, trait_profile, community_id, created_at, updated_at
            FROM user_account
            WHERE id = :id
            """
        ),
        {"id": user_id},
    ).mappings().first()
    return _user_row(row)


def get_user_credentials(db, email: str) -> dict[str, Any] | None:
    row = db.execute(
        text("SELECT id, email, password_hash, community_id FROM user_account WHERE email = :email"),
        {"email": email},
    ).mappings().first()
    return dict(row) if row else None


def list_community_users(db, community_id: int) -> list[dict[str, Any]]:
    rows = db.execute(
        text(
            """
            SELECT id, name, email, bio, created_at
            FROM user_account
            WHERE community_id = :community_id
            ORDER BY id
            """
        ),
        {"community_id": community_id},
    ).mappings().all()
    return [dict(r) for r in rows]


_UPDATABLE_USER_FIELDS = ("name", "email", "password_hash", "bio", "trait_profile")


def update_user(db, user_id: int, fields: dict[str, Any]) -> dict[str, Any] | None:
    updates = {k: v for k, v in fields.items() if k in _UPDATABLE_USER_FIELDS}
    if not updates:
        return get_user_by_id(db, user_id)
    if "trait_profile" in updates and updates["trait_profile"] is not None:
        updates["trait_profile"] = json.dumps(updates["trait_profile"])
    assignments = ", ".join(f"{k} = :{k}" for k in updates)
    try:
        with db.begin_nested():
            db.execute(
                text(f"UPDATE user_account SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = :id"),
                {**updates, "id": user_id},
            )
    except IntegrityError:
        return None
    return get_user_by_id(db, user_id)


def delete_user(db, user_id: int) -> bool:
    result = db.execute(text("DELETE FROM user_account WHERE id = :id"), {"id": user_id})
    return (result.rowcount or 0) > 0


def fetch_community_candidates(db, requester_id: int, community_id: int) -> list[dict[str, Any]]:
    """Other members of the community, flagged with whether the requester already liked them."""
    rows = db.execute(
        text(
            """
            SELECT ua.id, ua.name, ua.bio, ua.trait_profile, ua.community_id,
                   EXISTS (
                     SELECT 1 FROM user_like ul
                     WHERE ul.from_user_id = :requester_id AND ul.to_user_id = ua.id
                   ) AS liked_by_requester
            FROM user_account ua
            WHERE ua.community_id = :community_id
              AND ua.id <> :requester_id
            ORDER BY ua.id
            """
        ),
        {"requester_id": requester_id, "community_id": community_id},
    ).mappings().all()
    out = []
    for r in rows:
        row = _user_row(r)
        row["liked_by_requester"] = bool(row["liked_by_requester"])
        out.append(row)
    return out


# likes


def get_like(db, from_user_id: int, to_user_id: int) -> dict[str, Any] | None:
    row = db.execute(
        text(
            """
            SELECT id, from_user_id, to_user_id, created_at
            FROM user_like
            WHERE from_user_id = :from_user_id AND to_user_id = :to_user_id
            """
        ),
        {"from_user_id": from_user_id, "to_user_id": to_user_id},
    ).mappings().first()
    return dict(row) if row else None


def create_like(db, from_user_id: int, to_user_id: int) -> dict[str, Any] | None:
    """Insert a directed like; None when the pair already exists."""
    try:
        with db.begin_nested():
            db.execute(
                text("INSERT INTO user_like (from_user_id, to_user_id) VALUES (:from_user_id, :to_user_id)"),
                {"from_user_id": from_user_id, "to_user_id": to_user_id},
            )
    except IntegrityError:
        return None
    return get_like(db, from_user_id, to_user_id)


def delete_like(db, from_user_id: int, to_user_id: int) -> bool:
    result = db.execute(
        text("DELETE FROM user_like WHERE from_user_id = :from_user_id AND to_user_id = :to_user_id"),
        {"from_user_id": from_user_id, "to_user_id": to_user_id},
    )
    return (result.rowcount or 0) > 0


# matches


def get_match_for_pair(db, user_a_id: int, user_b_id: int) -> dict[str, Any] | None:
    low, high = canonical_pair(user_a_id, user_b_id)
    row = db.execute(
        text(
            """
            SELECT id, user_a_id, user_b_id, created_at
            FROM user_match
            WHERE user_a_id = :low AND user_b_id = :high
            """
        ),
        {"low": low, "high": high},
    ).mappings().first()
    return dict(row) if row else None


def get_match_by_id(db, match_id: int) -> dict[str, Any] | None:
    row = db.execute(
        text("SELECT id, user_a_id, user_b_id, created_at FROM user_match WHERE id = :id"),
        {"id": match_id},
    ).mappings().first()
    return dict(row) if row else None


def insert_match(db, user_a_id: int, user_b_id: int) -> bool:
    """Insert the canonical pair; False when the unique constraint rejects it."""
    low, high = canonical_pair(user_a_id, user_b_id)
    try:
        with db.begin_nested():
            db.execute(
                text("INSERT INTO user_match (user_a_id, user_b_id) VALUES (:low, :high)"),
                {"low": low, "high": high},
            )
    except IntegrityError:
        return False
    return True


def delete_match(db, match_id: int) -> bool:
    result = db.execute(text("DELETE FROM user_match WHERE id = :id"), {"id": match_id})
    return (result.rowcount or 0) > 0


def list_matches_for_user(db, user_id: int) -> list[dict[str, Any]]:
    rows = db.execute(
        text(
            """
            SELECT m.id AS match_id, m.created_at,
                   other.id AS other_id, other.name AS other_name, other.bio AS other_bio,
                   lm.id AS last_message_id, lm.text AS last_message_text,
                   lm.created_at AS last_message_at, lm.read AS last_message_read,
                   lm.sender_id AS last_message_sender_id
            FROM user_match m
            JOIN user_account other
              ON other.id = CASE WHEN m.user_a_id = :user_id THEN m.user_b_id ELSE m.user_a_id END
            LEFT JOIN message lm
              ON lm.id = (
                SELECT MAX(id) FROM message WHERE match_id = m.id
              )
            WHERE m.user_a_id = :user_id OR m.user_b_id = :user_id
            ORDER BY m.created_at DESC, m.id DESC
            """
        ),
        {"user_id": user_id},
    ).mappings().all()
    return [dict(r) for r in rows]


# messages


def create_message(db, *, match_id: int, sender_id: int, receiver_id: int, body: str) -> dict[str, Any]:
    row = db.execute(
        text(
            """
            INSERT INTO message (match_id, sender_id, receiver_id, text, read)
            VALUES (:match_id, :sender_id, :receiver_id, :text, :read)
            RETURNING id, match_id, sender_id, receiver_id, text, read, created_at
            """
        ),
        {"match_id": match_id, "sender_id": sender_id, "receiver_id": receiver_id, "text": body, "read": False},
    ).mappings().first()
    return _message_row(row)


def _message_row(row) -> dict[str, Any] | None:
    if not row:
        return None
    out = dict(row)
    out["read"] = bool(out.get("read"))
    return out


def get_message(db, message_id: int) -> dict[str, Any] | None:
    row = db.execute(
        text(
            """
            SELECT id, match_id, sender_id, receiver_id, text, read, created_at
            FROM message
            WHERE id = :id
            """
        ),
        {"id": message_id},
    ).mappings().first()
    return _message_row(row)


def list_match_messages(db, match_id: int) -> list[dict[str, Any]]:
    rows = db.execute(
        text(
            """
            SELECT id, match_id, sender_id, receiver_id, text, read, created_at
            FROM message
            WHERE match_id = :match_id
            ORDER BY created_at ASC, id ASC
            """
        ),
        {"match_id": match_id},
    ).mappings().all()
    return [_message_row(r) for r in rows]


def mark_messages_read(db, message_ids: list[int]) -> int:
    updated = 0
    for message_id in message_ids:
        result = db.execute(text("UPDATE message SET read = :read WHERE id = :id"), {"read": True, "id": message_id})
        updated += result.rowcount or 0
    return updated


def unread_counts_by_match(db, user_id: int) -> list[dict[str, Any]]:
    rows = db.execute(
        text(
            """
            SELECT m.id AS match_id,
                   CASE WHEN m.user_a_id = :user_id THEN m.user_b_id ELSE m.user_a_id END AS user_id,
                   COUNT(msg.id) AS unread_count
            FROM user_match m
            JOIN message msg ON msg.match_id = m.id
            WHERE msg.receiver_id = :user_id AND msg.read = :unread
            GROUP BY m.id, m.user_a_id, m.user_b_id
            ORDER BY m.id
            """
        ),
        {"user_id": user_id, "unread": False},
    ).mappings().all()
    return [{"match_id": r["match_id"], "user_id": r["user_id"], "unread_count": int(r["unread_count"])} for r in rows]
