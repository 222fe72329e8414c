from __future__ import annotations

import pytest
from pydantic import ValidationError

from officenpc.engine.world import OfficeWorld, WorldObject
from officenpc.models.character import Character, HeldItem, Needs, Task
from officenpc.npc.analyzer import analyze_incoming_message
from officenpc.npc.context import dialogue_context, gather_context, legal_intents, privacy_score


class BrokenWorld:
    def get_nearby_entities(self, character):
        raise RuntimeError("perception offline")

    def is_valid_location(self, location_id: str) -> bool:
        return True


def _types(intents) -> list[str]:
    return [intent.type for intent in intents]


def test_round_trip_tired_extrovert_hearing_about_the_game():
    character = Character(
        id="eve",
        name="Eve",
        personality_tags=["Extroverted"],
        needs=Needs(energy=2, hunger=8, social=8, comfort=8, stress=2),
        location="Office Area",
    )

    snapshot = gather_context(character, now=1_000)
    analysis = analyze_incoming_message("I'm so excited about the game tonight!")

    intents = snapshot.perception.intent_types
    assert "DRINK_COFFEE" in intents
    assert "EAT_SNACK" not in intents
    assert "SOCIALIZE" not in intents
    assert analysis.sentiment in {"positive", "very_positive"}
    assert {"entertainment", "sports"} & set(analysis.topics)
    assert snapshot.character.mood == "Tired"


def test_legal_intent_ladder_order():
    character = Character(
        id="a",
        name="Alice",
        held_item=HeldItem(id="mug", name="Mug"),
        assigned_task=Task(id="t1", name="Report", required_location="Office Area"),
        needs=Needs(hunger=1, social=2),
    )

    assert _types(legal_intents(character, "Office Area")) == [
        "IDLE",
        "MOVE_TO",
        "PUT_DOWN",
        "THROW",
        "WORK_ON",
        "EAT_SNACK",
        "SOCIALIZE",
    ]
    assert "WORK_ON" not in _types(legal_intents(character, "Break Room"))


def test_snapshot_is_frozen_and_detached_from_character():
    character = Character(id="a", name="Alice", location="Break Room", personality_tags=["Foodie"])
    snapshot = gather_context(character, now=5)

    character.personality_tags.append("Chaotic")
    character.needs.energy = 1

    assert snapshot.character.personality_tags == ("Foodie",)
    assert snapshot.character.needs["energy"] == 8.0
    with pytest.raises(ValidationError):
        snapshot.character.mood = "Happy"


def test_missing_location_and_failing_perception_use_defaults():
    character = Character(id="a", name="Alice")

    snapshot = gather_context(character, BrokenWorld(), now=1)

    assert snapshot.perception.location == "Unknown Location"
    assert snapshot.perception.nearby_characters == ()
    assert snapshot.timestamp == 1


def test_perception_through_office_world():
    world = OfficeWorld()
    alice = world.add_character(Character(id="a", name="Alice", location="Meeting Room"))
    world.add_character(Character(id="b", name="Bob", location="Meeting Room"))
    world.add_character(Character(id="c", name="Cara", location="Break Room"))
    world.add_object(WorldObject(id="tv", name="Screen", location="Meeting Room", position=(0.0, 21.0)))

    snapshot = gather_context(alice, world, now=1)

    assert [entity.id for entity in snapshot.perception.nearby_characters] == ["b"]
    assert [entity.id for entity in snapshot.perception.nearby_objects] == ["tv"]
    assert snapshot.perception.privacy_score == 6

    flat = dialogue_context(snapshot, hour=9)
    assert flat == {
        "location": "Meeting Room",
        "privacy": 6,
        "nearby_count": 1,
        "group_size": "one_on_one",
        "mood": "Neutral",
        "hour": 9,
    }


def test_privacy_drops_with_crowd():
    assert privacy_score("Bathroom") == 9
    assert privacy_score("Break Room", nearby_count=3) == 1
    assert privacy_score("Office Area", nearby_count=10) == 0
