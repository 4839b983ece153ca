"""
Bio -> TraitProfile extraction through an OpenAI chat model.

Extraction never raises to callers: empty bios, missing credentials, upstream
errors and unparseable responses all degrade to the default empty profile.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any

from openai import OpenAI

from ..config import (
    OPENAI_API_KEY,
    TRAIT_EXTRACTION_ENABLED,
    TRAIT_MAX_TOKENS,
    TRAIT_MODEL,
    TRAIT_TEMPERATURE,
)
from ..traits import TraitProfile, coerce_trait_profile, default_profile

logger = logging.getLogger(__name__)

_client: OpenAI | None = None

SYSTEM_PROMPT = (
    "You are a personality trait extractor. "
    "Extract personality traits, interests, and values from user bios."
)

USER_PROMPT_TEMPLATE = """Extract personality traits, interests, and values from the following user bio.
Return a JSON object with the following structure:
{{
  "personalityTraits": {{
    "extroversion": float between 0-1,
    "agreeableness": float between 0-1,
    "conscientiousness": float between 0-1,
    "neuroticism": float between 0-1,
    "openness": float between 0-1
  }},
  "interests": [array of interest keywords],
  "values": [array of personal values]
}}

User Bio: "{bio}"
"""

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def _get_client() -> OpenAI | None:
    global _client
    if _client is None:
        if not OPENAI_API_KEY:
            return None
        _client = OpenAI(api_key=OPENAI_API_KEY)
    return _client


def build_prompt(bio: str) -> str:
    return USER_PROMPT_TEMPLATE.format(bio=bio.strip())


def parse_trait_response(content: str | None) -> TraitProfile:
    """Parse model output into a profile, tolerating prose or code fences around the JSON."""
    if not content:
        return default_profile()
    found = _JSON_OBJECT.search(content)
    if not found:
        logger.warning("[traits] response contained no JSON object")
        return default_profile()
    try:
        payload: Any = json.loads(found.group(0))
    except json.JSONDecodeError:
        logger.warning("[traits] failed to parse model response as JSON")
        return default_profile()
    if isinstance(payload, dict) and isinstance(payload.get("traits"), dict):
        payload = payload["traits"]
    return coerce_trait_profile(payload) or default_profile()


def extract_traits_from_bio(bio: str | None, client: Any = None) -> TraitProfile:
    if not bio or not bio.strip():
        return default_profile()
    if not TRAIT_EXTRACTION_ENABLED:
        logger.debug("[traits] extraction disabled; using default profile")
        return default_profile()

    client = client or _get_client()
    if client is None:
        logger.warning("[traits] OPENAI_API_KEY not configured; using default profile")
        return default_profile()

    try:
        response = client.chat.completions.create(
            model=TRAIT_MODEL,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(bio)},
            ],
            temperature=TRAIT_TEMPERATURE,
            max_tokens=TRAIT_MAX_TOKENS,
        )
        content = response.choices[0].message.content if response.choices else None
    except Exception as exc:
        logger.warning("[traits] extraction request failed: %s", exc)
        return default_profile()

    profile = parse_trait_response(content)
    logger.debug(
        "[traits] extracted traits=%d interests=%d values=%d",
        len(profile.personality_traits),
        len(profile.interests),
        len(profile.values),
    )
    return profile
