from __future__ import annotations

import random

from officenpc.models.character import Character
from officenpc.npc.pools.base import TopicPool
from officenpc.npc.router import EMERGENCY_LINES, DialogueRouter, default_pools


class FakeLineSource:
    def __init__(self, line: str | None) -> None:
        self.line = line
        self.calls = 0

    def generate_line(self, message, character, context, record=None):
        self.calls += 1
        return self.line


class ExplodingPool(TopicPool):
    name = "exploding"
    priority = 0

    def matches(self, message: str) -> bool:
        raise RuntimeError("trigger table missing")

    def select_parts(self, response_type, analysis, character, context):
        raise RuntimeError("no phrase bank")


def _character(*traits: str, location: str | None = "Office Area") -> Character:
    return Character(id="c1", name="Casey", personality_tags=list(traits), location=location)


def test_pools_are_ordered_by_priority_with_general_last():
    router = DialogueRouter(rng=random.Random(0))

    assert list(router.pools) == [
        "work",
        "sports",
        "food",
        "technology",
        "personal",
        "entertainment",
        "hobbies",
        "banter",
        "general",
    ]


def test_work_outranks_other_matches():
    router = DialogueRouter(rng=random.Random(0))

    result = router.route("The client deadline is right after lunch", _character())

    assert result.selected_pool == "work"
    assert result.matched_pools[:2] == ["work", "food"]
    assert result.used_fallback is False
    assert result.confidence == 0.7


def test_game_message_routes_to_sports():
    router = DialogueRouter(rng=random.Random(0))

    result = router.route("I'm so excited about the game tonight!", _character("Extroverted"))

    assert result.selected_pool == "sports"
    assert result.confidence == 0.6
    assert result.response


def test_movie_and_music_route_to_entertainment():
    router = DialogueRouter(rng=random.Random(0))

    result = router.route("Have you seen that new movie? The music was great", _character())

    assert result.selected_pool == "entertainment"
    assert result.matched_pools == ["entertainment"]
    assert result.used_fallback is False
    assert result.confidence == 0.7


def test_hobby_talk_routes_to_hobbies():
    router = DialogueRouter(rng=random.Random(0))

    result = router.route("I just started knitting and my garden is blooming", _character("Social"))

    assert result.selected_pool == "hobbies"
    assert result.confidence == 0.7
    assert result.response


def test_unmatched_message_falls_back_to_general():
    router = DialogueRouter(rng=random.Random(0))

    result = router.route("It's nice out", _character())

    assert result.selected_pool == "general"
    assert result.used_fallback is True
    assert result.confidence == 0.3
    assert router.get_routing_stats()["fallback_routes"] == 1


def test_personality_bias_applies_only_without_matches():
    router = DialogueRouter(rng=random.Random(0))

    assert router.route("It's nice out", _character("Chaotic")).selected_pool == "banter"
    assert router.route("It's nice out", _character("Foodie")).selected_pool == "food"
    assert router.route("It's nice out", _character("Professional")).selected_pool == "general"
    assert router.route("Big game tonight", _character("Chaotic")).selected_pool == "sports"


def test_starters_use_traits_and_location():
    router = DialogueRouter(rng=random.Random(0))

    assert router.route("", _character("Professional")).selected_pool == "work"
    assert router.route("", _character(location="Break Room")).selected_pool == "food"
    starter = router.route("", _character())
    assert starter.selected_pool == "general"
    assert starter.confidence == 0.3


def test_line_source_is_consulted_first():
    source = FakeLineSource("Honestly, I think we should ship it.")
    router = DialogueRouter(rng=random.Random(0), line_source=source)

    result = router.route("Should we ship the project?", _character())

    assert result.response == "Honestly, I think we should ship it."
    assert result.source == "llm"
    assert result.selected_pool == "work"
    assert router.generated_lines == 1


def test_empty_line_source_output_defers_to_pools():
    router = DialogueRouter(rng=random.Random(0), line_source=FakeLineSource(""))

    result = router.route("Should we ship the project?", _character())

    assert result.source == "rules"
    assert result.response


def test_router_failure_returns_emergency_line():
    router = DialogueRouter(pools=[ExplodingPool(random.Random(0))], rng=random.Random(0))

    result = router.route("anything", _character())

    assert result.selected_pool == "router"
    assert result.confidence == 0.0
    assert result.response in EMERGENCY_LINES
    assert router.errors == 1


def test_stats_reset():
    router = DialogueRouter(pools=default_pools(random.Random(0)), rng=random.Random(0))
    router.route("Lunch?", _character())

    stats = router.get_routing_stats()
    assert stats["total_routes"] == 1
    assert stats["pool_usage"] == {"food": 1}

    router.reset_stats()
    assert router.get_routing_stats()["total_routes"] == 0
