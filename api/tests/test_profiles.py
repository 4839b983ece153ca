import pytest

from match_backend import repo
from match_backend.errors import InvalidSelfReference, NotMatched
from match_backend.services.messaging import read_match_thread, send_message
from match_backend.services.profiles import profile_for_bio, update_user_profile
from match_backend.services.reciprocity import record_like
from match_backend.traits import TraitProfile


class RecordingExtractor:
    def __init__(self, profile: TraitProfile):
        self.profile = profile
        self.calls = []

    def __call__(self, bio):
        self.calls.append(bio)
        return self.profile


def test_profile_for_bio_without_text_is_none():
    extractor = RecordingExtractor(TraitProfile({"openness": 0.5}))
    assert profile_for_bio(None, extractor) is None
    assert profile_for_bio("   ", extractor) is None
    assert extractor.calls == []


def test_degraded_extraction_still_yields_a_profile():
    extractor = RecordingExtractor(TraitProfile())
    stored = profile_for_bio("something the extractor could not read", extractor)
    assert stored == {"traits_version": 1, "personality_traits": {}, "interests": [], "values": []}


def test_bio_change_replaces_profile(db, community, make_user, make_profile):
    user = make_user(community["id"], trait_profile=make_profile({"openness": 0.1}, ["chess"]))
    extractor = RecordingExtractor(TraitProfile({"openness": 0.9}, frozenset({"hiking"})))

    updated = update_user_profile(db, user["id"], bio="  Hiking every weekend  ", extractor=extractor)
    assert extractor.calls == ["Hiking every weekend"]
    assert updated["bio"] == "Hiking every weekend"
    assert updated["trait_profile"]["interests"] == ["hiking"]
    assert updated["trait_profile"]["personality_traits"] == {"openness": 0.9}


def test_name_change_does_not_touch_profile(db, community, make_user, make_profile):
    user = make_user(community["id"], trait_profile=make_profile(interests=["chess"]))
    extractor = RecordingExtractor(TraitProfile())
    updated = update_user_profile(db, user["id"], name="Renamed", extractor=extractor)
    assert updated["name"] == "Renamed"
    assert updated["trait_profile"]["interests"] == ["chess"]
    assert extractor.calls == []


def test_messages_require_match_and_are_marked_read(db, community, make_user):
    a = make_user(community["id"])
    b = make_user(community["id"])
    with pytest.raises(NotMatched):
        send_message(db, a["id"], b["id"], "hello")
    with pytest.raises(InvalidSelfReference):
        send_message(db, a["id"], a["id"], "hello")

    record_like(db, a, b["id"])
    match = record_like(db, b, a["id"])
    send_message(db, a["id"], b["id"], "hello")
    send_message(db, b["id"], a["id"], "hey")
    db.commit()

    thread = read_match_thread(db, match, b["id"])
    assert [m["text"] for m in thread] == ["hello", "hey"]
    assert all(m["read"] for m in thread if m["receiver_id"] == b["id"])
    assert repo.unread_counts_by_match(db, b["id"]) == []
    assert repo.unread_counts_by_match(db, a["id"])[0]["unread_count"] == 1
