from __future__ import annotations

import random

import pytest

from officenpc.models.character import Character
from officenpc.npc.pools.banter import BANTER_STARTERS, BanterPool
from officenpc.npc.pools.base import PoolError, TopicPool, classify_by_keywords, keyword_pattern
from officenpc.npc.pools.entertainment import ENTERTAINMENT_STARTERS, EntertainmentPool
from officenpc.npc.pools.food import FoodPool
from officenpc.npc.pools.hobbies import HobbiesPool
from officenpc.npc.pools.personal import BOUNDARY_LINES, PersonalPool, is_topic_appropriate
from officenpc.npc.pools.sports import CORRECTION_PHRASES, SportsPool, football_correction_probability
from officenpc.npc.pools.technology import TechnologyPool
from officenpc.npc.pools.work import EVENING_STARTERS, MORNING_STARTERS, WORK_FALLBACKS_BY_TRAIT, WorkPool


class FixedDraw(random.Random):
    """Seeded choices, but every ``random()`` draw returns ``value``."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class BrokenSportsPool(SportsPool):
    def select_parts(self, response_type, analysis, character, context):
        raise RuntimeError("phrase bank corrupted")


def _character(*traits: str) -> Character:
    return Character(id="c1", name="Casey", personality_tags=list(traits))


def test_short_keywords_need_whole_words():
    pattern = keyword_pattern(["ai", "deadline"])

    assert pattern.search("the new AI model")
    assert not pattern.search("I said hello to the maintenance crew")
    assert pattern.search("deadlines everywhere")


def test_classify_by_keywords_prefers_later_entries():
    table = {"surface": ("work",), "intimate": ("secret",)}

    assert classify_by_keywords("a work secret", table, "casual") == "intimate"
    assert classify_by_keywords("nothing here", table, "casual") == "casual"


def test_football_correction_probability_is_additive_and_clamped():
    assert football_correction_probability([]) == pytest.approx(0.35)
    assert football_correction_probability(["Purist"]) == pytest.approx(0.65)
    assert football_correction_probability(["Polite"]) == pytest.approx(0.15)
    assert football_correction_probability(["Purist", "Pedantic", "Passionate"]) == 1.0


def test_purist_corrects_football_when_draw_is_under_probability():
    pool = SportsPool(FixedDraw(0.0))

    line = pool.generate_response("Did you watch football last night?", _character("Purist"))

    assert line.startswith(CORRECTION_PHRASES)


def test_purist_draw_above_probability_skips_correction():
    pool = SportsPool(FixedDraw(0.99))

    line = pool.generate_response("Did you watch football last night?", _character("Purist"))

    assert not line.startswith(CORRECTION_PHRASES)


def test_non_purist_is_never_corrected():
    pool = SportsPool(FixedDraw(0.0))

    line = pool.generate_response("The football final was wild", _character("Polite"))

    assert not line.startswith(CORRECTION_PHRASES)


def test_sports_analysis_sets_football_flags():
    pool = SportsPool(random.Random(1))

    analysis = pool.analyze("That touchdown in the NFL football game", {})

    assert analysis.flags["football_mention"] is True
    assert analysis.flags["american_football_context"] is True
    assert analysis.subtype == "soccer"
    assert pool.choose_response_type(analysis, _character(), {}) == "american_football_response"


def test_template_shape_and_excitement_intensity():
    pool = SportsPool(random.Random(3))

    line = pool.generate_response("What an amazing game!", _character())

    assert ". " in line
    assert pool.analyze("What an amazing game!", {}).intensity == "high"
    assert pool.analyze("That game was a disaster", {}).intensity == "low"
    assert pool.stats()["generated"] == 1


def test_pool_failure_returns_scoped_fallback():
    pool = BrokenSportsPool(random.Random(0))

    line = pool.generate_response("Big game tonight", _character())

    assert line in BrokenSportsPool.fallback_lines
    assert pool.fallbacks == 1


def test_pick_rejects_empty_candidates():
    with pytest.raises(PoolError):
        WorkPool(random.Random(0)).pick(())


def test_work_fallback_is_keyed_by_trait():
    pool = WorkPool(random.Random(0))

    assert pool.fallback_response(_character("Organized")) in WORK_FALLBACKS_BY_TRAIT["Organized"]


def test_work_starters_follow_time_of_day():
    pool = WorkPool(random.Random(0))
    character = _character("Professional")

    assert pool.conversation_starter(character, {"hour": 8}) in MORNING_STARTERS
    assert pool.conversation_starter(character, {"hour": 18}) in EVENING_STARTERS
    assert pool.conversation_starter(character, {"hour": 13}).endswith("?")


def test_work_professional_register():
    pool = WorkPool(random.Random(0))

    line = pool.apply_rules("yeah, no problem", pool.analyze("deadline", {}), _character("Professional"), {})

    assert line == "yes, of course"


def test_personal_pool_respects_privacy():
    pool = PersonalPool(random.Random(0))
    message = "I have a secret about my family"

    crowded = pool.generate_response(message, _character(), {"group_size": "large_group", "privacy": 2})
    private = pool.generate_response(message, _character(), {"group_size": "one_on_one", "privacy": 9})

    assert crowded in BOUNDARY_LINES
    assert private not in BOUNDARY_LINES


def test_topic_appropriateness_rules():
    assert is_topic_appropriate("intimate", {"group_size": "one_on_one", "privacy": 8})
    assert not is_topic_appropriate("intimate", {"group_size": "small_group", "privacy": 9})
    assert is_topic_appropriate("personal", {"group_size": "small_group", "privacy": 5})
    assert not is_topic_appropriate("personal", {"group_size": "large_group", "privacy": 9})
    assert is_topic_appropriate("surface", {"group_size": "large_group", "privacy": 0})
    assert is_topic_appropriate("intimate", {})


def test_technology_problem_solving_is_high_intensity():
    pool = TechnologyPool(random.Random(0))
    analysis = pool.analyze("My laptop keeps crashing with an error", {})

    assert pool.choose_response_type(analysis, _character(), {}) == "troubleshooting_response"
    assert analysis.intensity == "high"


def test_food_and_banter_generate_lines():
    food = FoodPool(random.Random(0)).generate_response("Want to grab lunch?", _character("Foodie"))
    banter = BanterPool(random.Random(0))

    assert food
    assert banter.generate_response("That joke was hilarious", _character("Funny"))
    assert banter.conversation_starter(_character("Chaotic"), {}) in BANTER_STARTERS


def test_topic_pool_requires_a_phrase_selector():
    with pytest.raises(TypeError):
        TopicPool(random.Random(0))


def test_entertainment_pool_guards_spoilers():
    pool = EntertainmentPool(random.Random(0))
    analysis = pool.analyze("Don't spoil the finale of that series", {})

    assert analysis.flags["spoiler_risk"] is True
    assert pool.choose_response_type(analysis, _character(), {}) == "television_response"
    assert pool.generate_response("Don't spoil the finale of that series", _character()).startswith(
        EntertainmentPool.openings["careful"]
    )


def test_entertainment_defaults_and_starters():
    pool = EntertainmentPool(random.Random(0))
    analysis = pool.analyze("What did you do last night?", {})

    assert pool.choose_response_type(analysis, _character("Bookish"), {}) == "books_response"
    assert pool.choose_response_type(analysis, _character(), {}) == "movies_response"
    assert pool.conversation_starter(_character(), {}) in ENTERTAINMENT_STARTERS


def test_hobbies_pool_reads_skill_level():
    pool = HobbiesPool(random.Random(0))
    analysis = pool.analyze("I just started painting watercolors", {})

    assert analysis.flags["skill_level"] == "beginner"
    assert analysis.subtype == "creative"
    assert pool.choose_response_type(analysis, _character(), {}) == "art_response"
    assert pool.generate_response("I just started painting watercolors", _character()).startswith(
        HobbiesPool.openings["seeking"]
    )


def test_hobbies_personality_defaults_without_triggers():
    pool = HobbiesPool(random.Random(0))
    analysis = pool.analyze("Any plans tonight?", {})

    assert analysis.detected == []
    assert pool.choose_response_type(analysis, _character("Patient"), {}) == "gardening_response"
    assert pool.choose_response_type(analysis, _character(), {}) == "pastime_response"
