import json
from types import SimpleNamespace

import pytest

pytest.importorskip("openai")

from match_backend.services import trait_extractor
from match_backend.services.trait_extractor import extract_traits_from_bio, parse_trait_response


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(content=None, error=None):
    completions = FakeCompletions(content=content, error=error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def test_extracts_profile_from_model_json():
    payload = {"personalityTraits": {"openness": 0.9}, "interests": ["hiking"], "values": ["honesty"]}
    client, completions = _client(content="Here you go:\n" + json.dumps(payload) + "\nThanks")
    profile = extract_traits_from_bio("I love hiking and honest people.", client=client)
    assert profile.personality_traits == {"openness": 0.9}
    assert profile.interests == frozenset({"hiking"})
    assert "I love hiking" in completions.calls[0]["messages"][1]["content"]
    assert completions.calls[0]["model"] == trait_extractor.TRAIT_MODEL


def test_wrapped_traits_key_is_unwrapped():
    profile = parse_trait_response(json.dumps({"traits": {"personalityTraits": {"openness": 0.2}, "interests": [], "values": []}}))
    assert profile.personality_traits == {"openness": 0.2}


def test_empty_bio_skips_upstream_call():
    client, completions = _client(content="{}")
    assert extract_traits_from_bio("   ", client=client).is_empty()
    assert extract_traits_from_bio(None, client=client).is_empty()
    assert completions.calls == []


def test_upstream_error_degrades_to_default_profile():
    client, _ = _client(error=RuntimeError("upstream unavailable"))
    assert extract_traits_from_bio("A bio", client=client).is_empty()


@pytest.mark.parametrize("content", [None, "", "no json here", "{not valid json}"])
def test_malformed_response_degrades_to_default_profile(content):
    client, _ = _client(content=content)
    assert extract_traits_from_bio("A bio", client=client).is_empty()


def test_missing_api_key_degrades_to_default_profile(monkeypatch):
    monkeypatch.setattr(trait_extractor, "OPENAI_API_KEY", "")
    monkeypatch.setattr(trait_extractor, "_client", None)
    assert extract_traits_from_bio("A bio").is_empty()
