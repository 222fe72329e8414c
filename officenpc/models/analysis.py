from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

MessageType = Literal[
    "question",
    "greeting",
    "complaint",
    "request",
    "exclamation",
    "information_sharing",
    "short_statement",
    "statement",
    "long_statement",
    "conversation_ender",
]

Sentiment = Literal["very_positive", "positive", "neutral", "negative", "very_negative"]
Level = Literal["low", "medium", "high"]
Formality = Literal["formal", "neutral", "informal"]
QuestionType = Literal["what", "how", "when", "where", "why", "who", "yes_no", "confirmation", "general"]


class ConversationElements(BaseModel):
    has_question: bool = False
    is_conversation_ender: bool = False
    has_intensifier: bool = False
    has_softener: bool = False
    has_personal_reference: bool = False
    has_other_reference: bool = False
    word_count: int = 0
    has_emoji: bool = False


class SocialCues(BaseModel):
    seeking_agreement: bool = False
    seeking_information: bool = False
    offering_help: bool = False
    expressing_concern: bool = False
    changing_subject: bool = False
    including_others: bool = False
    excluding_others: bool = False


class QuestionAnalysis(BaseModel):
    has_question: bool = False
    question_type: QuestionType | None = None
    expects_detailed_answer: bool = False
    is_rhetorical: bool = False
    is_open_ended: bool = False


class MessageAnalysis(BaseModel):
    original_message: str
    message_type: MessageType
    sentiment: Sentiment = "neutral"
    emotional_state: list[str] = Field(default_factory=lambda: ["neutral"])
    topics: list[str] = Field(default_factory=lambda: ["general"])
    urgency: Level = "low"
    formality: Formality = "neutral"
    conversation_elements: ConversationElements = Field(default_factory=ConversationElements)
    social_cues: SocialCues = Field(default_factory=SocialCues)
    question_analysis: QuestionAnalysis = Field(default_factory=QuestionAnalysis)
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)

    @property
    def is_negative(self) -> bool:
        return self.sentiment in {"negative", "very_negative"}

    @property
    def is_positive(self) -> bool:
        return self.sentiment in {"positive", "very_positive"}
