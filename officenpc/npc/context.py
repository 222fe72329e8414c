from __future__ import annotations

import logging
from typing import Any

from officenpc.engine.events import wall_clock_ms
from officenpc.engine.world import PerceptionProvider
from officenpc.models.character import Character
from officenpc.models.intents import LegalIntent
from officenpc.models.snapshot import CharacterSnapshot, ContextSnapshot, NearbyEntity, PerceptionBundle
from officenpc.npc.needs import restorative_intents

log = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown Location"
DEFAULT_PRIVACY = 2
PRIVACY_BY_LOCATION = {
    "break room": 3,
    "meeting room": 6,
    "bathroom": 9,
}

INTENT_DESCRIPTIONS = {
    "IDLE": "Do nothing for a moment",
    "MOVE_TO": "Walk to another part of the office",
    "PUT_DOWN": "Put down the held item",
    "THROW": "Throw the held item",
    "WORK_ON": "Work on the assigned task",
    "DRINK_COFFEE": "Grab a coffee to restore energy",
    "EAT_SNACK": "Eat a snack to deal with hunger",
    "SOCIALIZE": "Chat with a colleague to feel less lonely",
}


def snapshot_character(character: Character) -> CharacterSnapshot:
    return CharacterSnapshot(
        id=character.id,
        name=character.name,
        job_role=character.job_role,
        personality_tags=tuple(character.personality_tags),
        skills=dict(character.skills),
        needs=character.needs.model_dump(),
        mood=character.mood,
        short_term_memory=tuple(entry.model_copy() for entry in character.short_term_memory),
        long_term_memory=tuple(entry.model_copy() for entry in character.long_term_memory),
        long_term_goal=character.long_term_goal,
        assigned_task=character.assigned_task.model_copy() if character.assigned_task else None,
        held_item=character.held_item.model_copy() if character.held_item else None,
        action_state=character.action_state,
        is_busy=character.is_busy,
        current_action=character.current_action.model_copy() if character.current_action else None,
        conversation_partner_id=character.conversation_partner_id,
    )


def privacy_score(location: str, nearby_count: int = 0) -> int:
    base = DEFAULT_PRIVACY
    lowered = location.lower()
    for name, score in PRIVACY_BY_LOCATION.items():
        if name in lowered:
            base = score
            break
    crowd_penalty = max(0, nearby_count - 1)
    return max(0, min(10, base - crowd_penalty))


def legal_intents(character: Character, location: str) -> list[LegalIntent]:
    types: list[str] = ["IDLE", "MOVE_TO"]
    if character.held_item is not None:
        types.extend(["PUT_DOWN", "THROW"])
    task = character.assigned_task
    if task is not None and (task.required_location is None or task.required_location.lower() in location.lower()):
        types.append("WORK_ON")
    types.extend(restorative_intents(character.needs))
    return [LegalIntent(type=intent, description=INTENT_DESCRIPTIONS[intent]) for intent in types]


def _perceive(character: Character, world: PerceptionProvider | None) -> tuple[list[NearbyEntity], list[NearbyEntity]]:
    if world is None:
        return [], []
    try:
        nearby = world.get_nearby_entities(character) or {}
        return list(nearby.get("characters", [])), list(nearby.get("objects", []))
    except Exception:
        log.warning("perception_failed character=%s fallback=empty", character.id, exc_info=True)
        return [], []


def gather_context(
    character: Character,
    world: PerceptionProvider | None = None,
    *,
    now: int | None = None,
) -> ContextSnapshot:
    location = (character.location or "").strip() or UNKNOWN_LOCATION
    characters, objects = _perceive(character, world)
    try:
        intents = legal_intents(character, location)
    except Exception:
        log.warning("legal_intents_failed character=%s fallback=idle", character.id, exc_info=True)
        intents = [LegalIntent(type="IDLE", description=INTENT_DESCRIPTIONS["IDLE"])]
    perception = PerceptionBundle(
        location=location,
        privacy_score=privacy_score(location, len(characters)),
        nearby_characters=tuple(characters),
        nearby_objects=tuple(objects),
        available_intents=tuple(intents),
    )
    return ContextSnapshot(
        character=snapshot_character(character),
        perception=perception,
        timestamp=wall_clock_ms() if now is None else now,
    )


def group_size_label(nearby_count: int) -> str:
    if nearby_count <= 1:
        return "one_on_one"
    if nearby_count <= 4:
        return "small_group"
    return "large_group"


def dialogue_context(snapshot: ContextSnapshot, hour: int | None = None) -> dict[str, Any]:
    """Flatten a snapshot into the environmental context consumed by the dialogue pools."""
    nearby_count = len(snapshot.perception.nearby_characters)
    context: dict[str, Any] = {
        "location": snapshot.perception.location,
        "privacy": snapshot.perception.privacy_score,
        "nearby_count": nearby_count,
        "group_size": group_size_label(nearby_count),
        "mood": snapshot.character.mood,
    }
    if hour is not None:
        context["hour"] = hour
    return context
