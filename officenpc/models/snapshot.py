from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from officenpc.models.character import HeldItem, MemoryEntry, Task
from officenpc.models.intents import ActionIntent, ActionType, LegalIntent


class NearbyEntity(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    kind: Literal["character", "object"] = "character"
    distance: float = Field(default=0.0, ge=0.0)


class PerceptionBundle(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: str = "Unknown Location"
    privacy_score: int = Field(default=2, ge=0, le=10)
    nearby_characters: tuple[NearbyEntity, ...] = ()
    nearby_objects: tuple[NearbyEntity, ...] = ()
    available_intents: tuple[LegalIntent, ...] = ()

    @property
    def intent_types(self) -> tuple[ActionType, ...]:
        return tuple(intent.type for intent in self.available_intents)


class CharacterSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    job_role: str
    personality_tags: tuple[str, ...] = ()
    skills: dict[str, int] = Field(default_factory=dict)
    needs: dict[str, float] = Field(default_factory=dict)
    mood: str = "Neutral"
    short_term_memory: tuple[MemoryEntry, ...] = ()
    long_term_memory: tuple[MemoryEntry, ...] = ()
    long_term_goal: str | None = None
    assigned_task: Task | None = None
    held_item: HeldItem | None = None
    action_state: str = "idle"
    is_busy: bool = False
    current_action: ActionIntent | None = None
    conversation_partner_id: str | None = None


class ContextSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    character: CharacterSnapshot
    perception: PerceptionBundle
    timestamp: int
