from __future__ import annotations

import logging
import random
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from officenpc.models.character import Character

log = logging.getLogger(__name__)

Phrases = tuple[str, ...]


class PoolError(RuntimeError):
    pass


@dataclass(frozen=True)
class TriggerSpec:
    keywords: tuple[str, ...]
    response_type: str
    urgency: str = "medium"


@dataclass
class DetectedTrigger:
    category: str
    matches: list[str]
    response_type: str
    urgency: str


@dataclass
class TriggerAnalysis:
    message: str
    detected: list[DetectedTrigger] = field(default_factory=list)
    intensity: str = "medium"
    subtype: str = "general"
    flags: dict[str, Any] = field(default_factory=dict)

    @property
    def primary(self) -> DetectedTrigger | None:
        return self.detected[0] if self.detected else None

    @property
    def hit_count(self) -> int:
        return sum(len(trigger.matches) for trigger in self.detected)


def keyword_pattern(keywords: Iterable[str]) -> re.Pattern[str]:
    # Short keywords ("ai", "tv") must match whole words; longer ones may be stems.
    ordered = sorted({k.lower() for k in keywords}, key=len, reverse=True)
    alternatives = (re.escape(k) + (r"\b" if len(k) <= 3 else "") for k in ordered)
    return re.compile(r"\b(" + "|".join(alternatives) + r")", re.IGNORECASE)


def classify_by_keywords(message: str, table: Mapping[str, Sequence[str]], default: str) -> str:
    """Later table entries win when several match."""
    selected = default
    for key, keywords in table.items():
        if keyword_pattern(keywords).search(message):
            selected = key
    return selected


EXCITEMENT_WORDS = ("amazing", "incredible", "unbelievable", "awesome", "fantastic")
DISAPPOINTMENT_WORDS = ("terrible", "awful", "disappointing", "horrible", "disaster")


class TopicPool(ABC):
    """One conversational domain: a trigger vocabulary plus a modular phrase bank.

    Subclasses fill in the class-level tables and ``select_parts``; the shared
    ``generate_response`` runs analyze -> choose response type -> assemble -> rules
    and degrades to one of ``fallback_lines`` on any failure.
    """

    name = "base"
    priority = 100
    triggers: dict[str, TriggerSpec] = {}
    openings: dict[str, Phrases] = {}
    core_content: dict[str, dict[str, Phrases]] = {}
    transitions: dict[str, Phrases] = {}
    closings: dict[str, Phrases] = {}
    personality_defaults: tuple[tuple[tuple[str, ...], str], ...] = ()
    default_core = "that's really interesting"
    fallback_lines: Phrases = ("That's interesting.",)

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random(0)
        self._patterns = {category: keyword_pattern(spec.keywords) for category, spec in self.triggers.items()}
        self.generated = 0
        self.fallbacks = 0

    def match_triggers(self, message: str) -> list[DetectedTrigger]:
        detected: list[DetectedTrigger] = []
        for category, spec in self.triggers.items():
            found = self._patterns[category].findall(message)
            if not found:
                continue
            matches = list(dict.fromkeys(m.lower() for m in found))
            detected.append(
                DetectedTrigger(category=category, matches=matches, response_type=spec.response_type, urgency=spec.urgency)
            )
        return detected

    def matches(self, message: str) -> bool:
        return bool(message) and bool(self.match_triggers(message))

    def analyze(self, message: str, context: Mapping[str, Any]) -> TriggerAnalysis:
        analysis = TriggerAnalysis(message=message, detected=self.match_triggers(message))
        lowered = message.lower()
        if any(word in lowered for word in EXCITEMENT_WORDS):
            analysis.intensity = "high"
        elif any(word in lowered for word in DISAPPOINTMENT_WORDS):
            analysis.intensity = "low"
        return analysis

    def choose_response_type(self, analysis: TriggerAnalysis, character: Character, context: Mapping[str, Any]) -> str:
        if analysis.primary is not None:
            return analysis.primary.response_type
        for traits, response_type in self.personality_defaults:
            if character.has_trait(*traits):
                return response_type
        return self.topic_fallback(analysis, context)

    def topic_fallback(self, analysis: TriggerAnalysis, context: Mapping[str, Any]) -> str:
        return next(iter(self.core_content), "")

    @abstractmethod
    def select_parts(
        self,
        response_type: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> tuple[str, str, str, str]:
        raise NotImplementedError

    def apply_rules(
        self,
        line: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> str:
        return line

    def assemble(self, opening: str, core: str, transition: str, closing: str) -> str:
        if opening.endswith((".", "!", "?", ":")):
            core = core[:1].upper() + core[1:]
        return f"{opening} {core}. {transition} {closing}"

    def generate_response(self, message: str, character: Character, context: Mapping[str, Any] | None = None) -> str:
        ctx = context or {}
        try:
            analysis = self.analyze(message or "", ctx)
            response_type = self.choose_response_type(analysis, character, ctx)
            opening, core, transition, closing = self.select_parts(response_type, analysis, character, ctx)
            line = self.apply_rules(self.assemble(opening, core, transition, closing), analysis, character, ctx)
            self.generated += 1
            log.debug("pool_response pool=%s type=%s character=%s", self.name, response_type, character.id)
            return line
        except Exception:
            self.fallbacks += 1
            log.warning("pool_failed pool=%s character=%s fallback=generic", self.name, character.id, exc_info=True)
            return self.fallback_response(character)

    def conversation_starter(self, character: Character, context: Mapping[str, Any]) -> str | None:
        return None

    def fallback_response(self, character: Character) -> str:
        return self.rng.choice(self.fallback_lines)

    def pick(self, options: Sequence[str]) -> str:
        if not options:
            raise PoolError(f"{self.name}_empty_candidates")
        return self.rng.choice(list(options))

    def core_line(self, response_type: str, preferred: Sequence[str] = ()) -> str:
        category = self.core_content.get(response_type)
        if not category:
            return self.default_core
        for sub in preferred:
            if sub in category:
                return self.pick(category[sub])
        return self.pick(next(iter(category.values())))

    def stats(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "trigger_categories": len(self.triggers),
            "response_types": len(self.core_content),
            "generated": self.generated,
            "fallbacks": self.fallbacks,
        }
