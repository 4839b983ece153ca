import pytest

from match_backend import repo
from match_backend.errors import MissingProfile, UserNotFound
from match_backend.services.matching import build_candidate_set, find_compatible_users, rank_candidates
from match_backend.traits import coerce_trait_profile


def _row(user_id, trait_profile, liked=False, community_id=1, name=None):
    return {
        "id": user_id,
        "name": name or f"u{user_id}",
        "bio": "bio",
        "trait_profile": trait_profile,
        "community_id": community_id,
        "liked_by_requester": liked,
    }


def test_candidate_set_excludes_self_liked_other_community_and_profileless(make_profile):
    p = make_profile({"openness": 0.5})
    requester = {"id": 0, "community_id": 1}
    rows = [
        _row(0, p),
        _row(1, p),
        _row(2, p, liked=True),
        _row(3, None),
        _row(4, p, community_id=2),
    ]
    assert [r["id"] for r in build_candidate_set(requester, rows)] == [1]


def test_rank_orders_by_score_and_truncates(make_profile):
    requester = coerce_trait_profile(make_profile({"openness": 1.0}, ["hiking"]))
    candidates = [
        _row(1, make_profile({"openness": 0.1})),
        _row(2, make_profile({"openness": 1.0}, ["hiking"])),
        _row(3, make_profile({}, ["chess"])),
        _row(4, make_profile({"openness": 0.9}, ["hiking", "chess"])),
        _row(5, make_profile({"openness": 0.5}, ["hiking"])),
    ]
    ranked = rank_candidates(requester, candidates, limit=5)
    assert [r.candidate_id for r in ranked][0] == 2
    assert [r.score for r in ranked] == sorted((r.score for r in ranked), reverse=True)
    assert ranked[-1].candidate_id == 3
    assert ranked[-1].score == 0.0

    top = rank_candidates(requester, candidates, limit=1)
    assert len(top) == 1
    assert top[0].candidate_id == 2


def test_ties_break_by_candidate_id(make_profile):
    requester = coerce_trait_profile(make_profile(interests=["hiking"]))
    same = make_profile(interests=["hiking"])
    candidates = [_row(9, same), _row(3, same), _row(7, same)]
    assert [r.candidate_id for r in rank_candidates(requester, candidates, limit=3)] == [3, 7, 9]
    assert [r.candidate_id for r in rank_candidates(requester, list(reversed(candidates)), limit=2)] == [3, 7]


def test_rank_drops_candidates_without_profile_even_if_passed(make_profile):
    requester = coerce_trait_profile(make_profile(interests=["x"]))
    ranked = rank_candidates(requester, [_row(1, None), _row(2, make_profile(interests=["x"]))], limit=10)
    assert [r.candidate_id for r in ranked] == [2]


def test_rank_accepts_any_positive_limit_and_rejects_non_positive(make_profile):
    requester = coerce_trait_profile(make_profile(interests=["x"]))
    candidates = [_row(i, make_profile(interests=["x"])) for i in range(1, 4)]
    assert len(rank_candidates(requester, candidates, limit=500)) == 3
    with pytest.raises(ValueError):
        rank_candidates(requester, candidates, limit=0)


def test_rank_empty_candidate_set_returns_empty_list(make_profile):
    requester = coerce_trait_profile(make_profile(interests=["x"]))
    assert rank_candidates(requester, [], limit=5) == []


def test_find_compatible_users_excludes_users_the_requester_liked(db, community, make_user, make_profile):
    p = make_profile({"openness": 0.7}, ["hiking"])
    u0 = make_user(community["id"], trait_profile=p)
    u1 = make_user(community["id"], trait_profile=p)
    u2 = make_user(community["id"], trait_profile=p)
    u3 = make_user(community["id"], trait_profile=p)
    repo.create_like(db, u0["id"], u2["id"])
    db.commit()

    ids = [m["candidate_id"] for m in find_compatible_users(db, u0["id"], 10)]
    assert u2["id"] not in ids
    assert sorted(ids) == sorted([u1["id"], u3["id"]])


def test_being_liked_by_a_candidate_does_not_exclude_them(db, community, make_user, make_profile):
    p = make_profile(interests=["jazz"])
    u0 = make_user(community["id"], trait_profile=p)
    u1 = make_user(community["id"], trait_profile=p)
    repo.create_like(db, u1["id"], u0["id"])
    db.commit()

    assert [m["candidate_id"] for m in find_compatible_users(db, u0["id"], 5)] == [u1["id"]]


def test_find_compatible_users_is_scoped_to_community(db, community, make_user, make_profile):
    other = repo.create_community(db, "Elsewhere", "elsewhere")
    db.commit()
    p = make_profile(interests=["jazz"])
    u0 = make_user(community["id"], trait_profile=p)
    make_user(other["id"], trait_profile=p)
    make_user(community["id"], trait_profile=None)

    assert find_compatible_users(db, u0["id"], 5) == []


def test_requester_without_profile_is_rejected(db, community, make_user):
    u0 = make_user(community["id"], trait_profile=None)
    with pytest.raises(MissingProfile):
        find_compatible_users(db, u0["id"], 5)


def test_unknown_requester_is_rejected(db):
    with pytest.raises(UserNotFound):
        find_compatible_users(db, 12345, 5)


def test_end_to_end_two_member_community(db, community, make_user, make_profile):
    u1 = make_user(community["id"], name="Ana", trait_profile=make_profile({"openness": 0.9}, ["hiking"]))
    u2 = make_user(community["id"], name="Ben", trait_profile=make_profile({"openness": 0.85}, ["hiking"]))

    result = find_compatible_users(db, u1["id"], 5)
    assert len(result) == 1
    assert result[0]["candidate_id"] == u2["id"]
    assert result[0]["name"] == "Ben"
    assert result[0]["score"] == pytest.approx(0.999, abs=1e-3)
