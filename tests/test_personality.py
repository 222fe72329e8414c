from __future__ import annotations

import random

from officenpc.models.character import Character
from officenpc.npc.analyzer import analyze_incoming_message
from officenpc.npc.personality import (
    FOLLOW_UP_REMARKS,
    SIGN_OFFS,
    adjust_response_length,
    apply_personality,
    cleanup_response,
    finalize_response,
    follow_up_remark,
    sign_off,
)


def _character(*traits: str) -> Character:
    return Character(id="c1", name="Casey", personality_tags=list(traits))


def test_professional_formalizes_and_acknowledges_urgency():
    analysis = analyze_incoming_message("URGENT!! the build is broken")

    line = apply_personality("yeah I'm gonna fix it", _character("Professional"), analysis, random.Random(0))

    assert line == "I understand the urgency. yes I'm going to fix it"


def test_introvert_drops_exclamations():
    line = apply_personality("Great news!", _character("Introverted"), analyze_incoming_message("ok"), random.Random(0))

    assert "!" not in line


def test_cleanup_normalizes_whitespace_case_and_punctuation():
    assert cleanup_response("  sounds   good ") == "Sounds good."
    assert cleanup_response("Really?") == "Really?"
    assert cleanup_response("   ") == ""


def test_introvert_length_is_capped_to_first_sentence():
    long_line = "This is the first sentence of a long reply. And here is another one that goes on."

    shortened = adjust_response_length(long_line, _character("Introverted"), analyze_incoming_message("ok"), random.Random(0))

    assert shortened == "This is the first sentence of a long reply."


def test_finalize_always_ends_with_punctuation():
    line = finalize_response("ok then", _character(), analyze_incoming_message("ok"), random.Random(0))

    assert line == "Ok then."


def test_sign_off_uses_first_trait():
    assert sign_off(_character("Professional", "Extroverted"), random.Random(0)) in SIGN_OFFS["Professional"]


def test_follow_up_remark_is_probability_gated():
    gossip = _character("Gossip")

    assert follow_up_remark(gossip, random.Random(0), 1.0) == FOLLOW_UP_REMARKS["Gossip"]
    assert follow_up_remark(gossip, random.Random(0), 0.0) is None
    assert follow_up_remark(_character("Professional"), random.Random(0), 1.0) is None
