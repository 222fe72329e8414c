from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from officenpc.models.intents import ActionIntent, ActionType

Importance = Literal["low", "normal", "high"]
MemoryKind = Literal["thought", "dialogue"]

NEED_NAMES = ("energy", "hunger", "social", "comfort", "stress")
NEED_MIN = 0.0
NEED_MAX = 10.0


def clamp_need(value: float) -> float:
    return max(NEED_MIN, min(NEED_MAX, float(value)))


class Needs(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    energy: float = 8.0
    hunger: float = 8.0
    social: float = 8.0
    comfort: float = 8.0
    stress: float = 2.0

    @field_validator(*NEED_NAMES, mode="before")
    @classmethod
    def _clamp(cls, value: object) -> float:
        return clamp_need(float(value))


def mood_for_needs(needs: Needs) -> str:
    if needs.energy < 3:
        return "Tired"
    if needs.hunger < 3:
        return "Hungry"
    if needs.social < 3:
        return "Lonely"
    if needs.stress > 7:
        return "Stressed"
    if needs.comfort < 3:
        return "Uncomfortable"
    return "Neutral"


class MemoryEntry(BaseModel):
    kind: MemoryKind
    content: str
    timestamp: int
    importance: Importance = "low"


class Task(BaseModel):
    id: str
    name: str
    required_location: str | None = None
    progress: float = Field(default=0.0, ge=0.0, le=100.0)


class HeldItem(BaseModel):
    id: str
    name: str


class ActionHistoryEntry(BaseModel):
    type: ActionType
    target: str | None = None
    started_at: int
    duration: int
    need_deltas: dict[str, float] = Field(default_factory=dict)


class Character(BaseModel):
    id: str
    name: str
    job_role: str = "Employee"
    personality_tags: list[str] = Field(default_factory=list)
    skills: dict[str, int] = Field(default_factory=dict)
    needs: Needs = Field(default_factory=Needs)
    short_term_memory: list[MemoryEntry] = Field(default_factory=list)
    long_term_memory: list[MemoryEntry] = Field(default_factory=list)
    long_term_goal: str | None = None
    assigned_task: Task | None = None
    held_item: HeldItem | None = None
    location: str | None = None
    action_state: str = "idle"
    is_busy: bool = False
    current_action: ActionIntent | None = None
    action_started_at: int | None = None
    action_queue: list[ActionIntent] = Field(default_factory=list)
    action_history: list[ActionHistoryEntry] = Field(default_factory=list)
    conversation_partner_id: str | None = None
    last_utterance: str | None = None

    @property
    def mood(self) -> str:
        return mood_for_needs(self.needs)

    def has_trait(self, *traits: str) -> bool:
        return any(trait in self.personality_tags for trait in traits)
