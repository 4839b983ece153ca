from match_backend.services.state_machine import (
    MATCHED,
    MUTUAL_LIKE,
    NO_RELATION,
    ONE_SIDED_LIKE,
    pair_state,
    transition_pair,
)


def test_pair_state_from_likes_and_match():
    assert pair_state(False, False, False) == NO_RELATION
    assert pair_state(True, False, False) == ONE_SIDED_LIKE
    assert pair_state(False, True, False) == ONE_SIDED_LIKE
    assert pair_state(True, True, False) == MUTUAL_LIKE
    assert pair_state(True, True, True) == MATCHED


def test_stale_match_without_mutual_likes_is_not_matched():
    assert pair_state(True, False, True) == ONE_SIDED_LIKE


def test_like_transitions():
    assert transition_pair(NO_RELATION, "like") == ONE_SIDED_LIKE
    assert transition_pair(ONE_SIDED_LIKE, "like") == MUTUAL_LIKE
    assert transition_pair(MUTUAL_LIKE, "match") == MATCHED
    assert transition_pair(MATCHED, "match") == MATCHED


def test_unlike_transitions():
    assert transition_pair(MATCHED, "unlike") == ONE_SIDED_LIKE
    assert transition_pair(MUTUAL_LIKE, "unlike") == ONE_SIDED_LIKE
    assert transition_pair(ONE_SIDED_LIKE, "unlike") == NO_RELATION
    assert transition_pair(NO_RELATION, "unlike") == NO_RELATION


def test_unknown_action_keeps_state():
    assert transition_pair(MATCHED, "view") == MATCHED
