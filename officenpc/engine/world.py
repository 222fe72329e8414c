from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Protocol

from officenpc.models.character import Character
from officenpc.models.snapshot import NearbyEntity

log = logging.getLogger(__name__)


class PerceptionProvider(Protocol):
    def get_nearby_entities(self, character: Character) -> dict[str, list[NearbyEntity]]: ...

    def is_valid_location(self, location_id: str) -> bool: ...


class MovementExecutor(Protocol):
    def move_character_to(self, character: Character, target: str) -> bool: ...


class CharacterRegistry(Protocol):
    def get_character(self, character_id: str) -> Character | None: ...

    def get_characters_in_location(self, location_id: str) -> list[Character]: ...


class EventSink(Protocol):
    def fire_event(self, name: str, payload: dict[str, Any]) -> None: ...


@dataclass
class WorldObject:
    id: str
    name: str
    location: str
    position: tuple[float, float] = (0.0, 0.0)


class OfficeWorld:
    """In-memory office floor implementing the perception, movement and registry collaborators."""

    def __init__(
        self,
        locations: dict[str, tuple[float, float]] | None = None,
        *,
        perception_radius: float = 5.0,
    ) -> None:
        self.locations: dict[str, tuple[float, float]] = dict(
            locations
            or {
                "Office Area": (0.0, 0.0),
                "Break Room": (20.0, 0.0),
                "Meeting Room": (0.0, 20.0),
                "Bathroom": (20.0, 20.0),
            }
        )
        self.perception_radius = perception_radius
        self.characters: dict[str, Character] = {}
        self.positions: dict[str, tuple[float, float]] = {}
        self.objects: list[WorldObject] = []

    def add_character(self, character: Character, position: tuple[float, float] | None = None) -> Character:
        self.characters[character.id] = character
        anchor = self.locations.get(character.location or "", (0.0, 0.0))
        self.positions[character.id] = position or anchor
        return character

    def remove_character(self, character_id: str) -> Character | None:
        self.positions.pop(character_id, None)
        removed = self.characters.pop(character_id, None)
        if removed is not None:
            log.info("character_removed character=%s", character_id)
        return removed

    def add_object(self, obj: WorldObject) -> WorldObject:
        self.objects.append(obj)
        return obj

    def get_character(self, character_id: str) -> Character | None:
        return self.characters.get(character_id)

    def get_characters_in_location(self, location_id: str) -> list[Character]:
        return [c for c in self.characters.values() if c.location == location_id]

    def is_valid_location(self, location_id: str) -> bool:
        return location_id in self.locations

    def get_nearby_entities(self, character: Character) -> dict[str, list[NearbyEntity]]:
        origin = self.positions.get(character.id)
        if origin is None or character.location is None:
            return {"characters": [], "objects": []}
        nearby_characters: list[NearbyEntity] = []
        for other in self.get_characters_in_location(character.location):
            if other.id == character.id:
                continue
            distance = _distance(origin, self.positions.get(other.id, origin))
            if distance <= self.perception_radius:
                nearby_characters.append(NearbyEntity(id=other.id, name=other.name, kind="character", distance=distance))
        nearby_objects: list[NearbyEntity] = []
        for obj in self.objects:
            if obj.location != character.location:
                continue
            distance = _distance(origin, obj.position)
            if distance <= self.perception_radius:
                nearby_objects.append(NearbyEntity(id=obj.id, name=obj.name, kind="object", distance=distance))
        nearby_characters.sort(key=lambda entity: entity.distance)
        nearby_objects.sort(key=lambda entity: entity.distance)
        return {"characters": nearby_characters, "objects": nearby_objects}

    def move_character_to(self, character: Character, target: str) -> bool:
        if target not in self.locations:
            return False
        character.location = target
        self.positions[character.id] = self.locations[target]
        log.debug("character_moved character=%s target=%s", character.id, target)
        return True


def _distance(a: tuple[float, float], b: tuple[float, float]) -> float:
    return round(math.hypot(a[0] - b[0], a[1] - b[1]), 3)
