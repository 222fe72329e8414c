from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ActionType = Literal[
    "IDLE",
    "MOVE_TO",
    "WORK_ON",
    "START_CONVERSATION",
    "DRINK_COFFEE",
    "EAT_SNACK",
    "SOCIALIZE",
    "PUT_DOWN",
    "THROW",
]

ActionPriority = Literal["low", "normal", "high", "critical"]

ResponseType = Literal["ACTION", "DIALOGUE", "MIXED", "IDLE"]


class ActionIntent(BaseModel):
    type: ActionType
    target: str | None = None
    duration: int | None = Field(default=None, ge=0)
    priority: ActionPriority = "normal"


class AIResponse(BaseModel):
    response_type: ResponseType
    action: ActionIntent | None = None
    content: str | None = None
    target: str | None = None
    thought: str | None = None
    duration: int | None = Field(default=None, ge=0)


class LegalIntent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ActionType
    description: str
