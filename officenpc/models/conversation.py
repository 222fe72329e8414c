from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from officenpc.models.analysis import Sentiment

ConversationState = Literal["active", "topic_exhausted", "winding_down", "ending"]


class HistoryEntry(BaseModel):
    speaker_id: str
    speaker_name: str
    message: str
    timestamp: int
    turn_number: int
    message_type: str | None = None
    topics: list[str] = Field(default_factory=list)
    sentiment: Sentiment = "neutral"
    routed_pool: str | None = None
    is_response: bool = False


class RoutingDecision(BaseModel):
    turn: int
    pool: str
    confidence: float
    timestamp: int


class ConversationRecord(BaseModel):
    id: str
    participants: list[str] = Field(default_factory=list)
    start_time: int
    last_activity: int
    turn_count: int = 0
    topics: list[str] = Field(default_factory=list)
    sentiment: Sentiment = "neutral"
    last_speaker: str | None = None
    state: ConversationState = "active"
    history: list[HistoryEntry] = Field(default_factory=list)
    routing_history: list[RoutingDecision] = Field(default_factory=list)
