from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from officenpc.models.character import Character
from officenpc.models.conversation import ConversationRecord
from officenpc.npc.pools.banter import BanterPool
from officenpc.npc.pools.base import TopicPool
from officenpc.npc.pools.entertainment import EntertainmentPool
from officenpc.npc.pools.food import FoodPool
from officenpc.npc.pools.general import GeneralPool
from officenpc.npc.pools.hobbies import HobbiesPool
from officenpc.npc.pools.personal import PersonalPool
from officenpc.npc.pools.sports import SportsPool
from officenpc.npc.pools.technology import TechnologyPool
from officenpc.npc.pools.work import WorkPool

log = logging.getLogger(__name__)

BANTER_TRAITS = ("Chaotic", "Funny", "Playful", "Sarcastic")
WORK_STARTER_TRAITS = ("Professional", "Ambitious", "Organized")
FOOD_STARTER_LOCATIONS = ("break room", "kitchen")
EMERGENCY_LINES = ("I see.", "Interesting.", "Hm, tell me more.", "Right.")
FALLBACK_CONFIDENCE = 0.3


class LineSource(Protocol):
    """An alternative line generator consulted before the rule pools; ``None`` or ``""`` defers to them."""

    def generate_line(
        self,
        message: str,
        character: Character,
        context: Mapping[str, Any],
        record: ConversationRecord | None = None,
    ) -> str | None: ...


@dataclass
class RoutingResult:
    selected_pool: str
    confidence: float
    response: str
    matched_pools: list[str] = field(default_factory=list)
    used_fallback: bool = False
    source: str = "rules"


def default_pools(rng: random.Random | None = None) -> list[TopicPool]:
    picker = rng or random.Random(0)
    return [
        WorkPool(picker),
        SportsPool(picker),
        FoodPool(picker),
        TechnologyPool(picker),
        PersonalPool(picker),
        EntertainmentPool(picker),
        HobbiesPool(picker),
        BanterPool(picker),
        GeneralPool(picker),
    ]


class DialogueRouter:
    def __init__(
        self,
        pools: Sequence[TopicPool] | None = None,
        rng: random.Random | None = None,
        line_source: LineSource | None = None,
    ) -> None:
        self.rng = rng or random.Random(0)
        ordered = sorted(pools if pools is not None else default_pools(self.rng), key=lambda pool: pool.priority)
        self.pools: dict[str, TopicPool] = {pool.name: pool for pool in ordered}
        if "general" not in self.pools:
            self.pools["general"] = GeneralPool(self.rng)
        self.line_source = line_source
        self.total_routes = 0
        self.pool_counts: Counter[str] = Counter()
        self.fallback_routes = 0
        self.errors = 0
        self.generated_lines = 0

    def select_pool(
        self,
        message: str,
        character: Character,
        context: Mapping[str, Any],
    ) -> tuple[TopicPool, list[str], bool]:
        """Return (pool, matched pool names, used_fallback). Matching pools win by declared priority."""
        matched = [
            pool.name for pool in self.pools.values() if pool.name != "general" and message and pool.matches(message)
        ]
        if matched:
            return self.pools[matched[0]], matched, False
        biased = self._personality_bias(character, context, starter=not message.strip())
        if biased is not None and biased in self.pools:
            return self.pools[biased], [], False
        return self.pools["general"], [], True

    def _personality_bias(self, character: Character, context: Mapping[str, Any], *, starter: bool) -> str | None:
        if character.has_trait(*BANTER_TRAITS):
            return "banter"
        if starter and character.has_trait(*WORK_STARTER_TRAITS):
            return "work"
        if character.has_trait("Foodie"):
            return "food"
        location = str(context.get("location", "")).lower()
        if starter and any(name in location for name in FOOD_STARTER_LOCATIONS):
            return "food"
        return None

    def route(
        self,
        message: str | None,
        character: Character,
        context: Mapping[str, Any] | None = None,
        record: ConversationRecord | None = None,
    ) -> RoutingResult:
        text = message or ""
        ctx = context or {}
        self.total_routes += 1
        try:
            pool, matched, used_fallback = self.select_pool(text, character, ctx)
            if used_fallback:
                self.fallback_routes += 1
            self.pool_counts[pool.name] += 1
            generated = self._generated_line(text, character, ctx, record)
            if generated:
                return RoutingResult(pool.name, self._confidence(pool, text, used_fallback), generated, matched, used_fallback, "llm")
            response = pool.conversation_starter(character, ctx) if not text.strip() else None
            if not response:
                response = pool.generate_response(text, character, ctx)
            log.debug("dialogue_routed pool=%s matched=%s character=%s", pool.name, ",".join(matched) or "-", character.id)
            return RoutingResult(pool.name, self._confidence(pool, text, used_fallback), response, matched, used_fallback)
        except Exception:
            self.errors += 1
            log.warning("routing_failed character=%s fallback=emergency", character.id, exc_info=True)
            return RoutingResult("router", 0.0, self.rng.choice(EMERGENCY_LINES), [], True)

    def _generated_line(
        self,
        message: str,
        character: Character,
        context: Mapping[str, Any],
        record: ConversationRecord | None,
    ) -> str | None:
        if self.line_source is None:
            return None
        try:
            line = self.line_source.generate_line(message, character, context, record)
        except Exception:
            log.warning("line_source_failed character=%s fallback=rules", character.id, exc_info=True)
            return None
        if line and line.strip():
            self.generated_lines += 1
            return line.strip()
        return None

    def _confidence(self, pool: TopicPool, message: str, used_fallback: bool) -> float:
        if used_fallback or not message:
            return FALLBACK_CONFIDENCE
        hits = sum(len(trigger.matches) for trigger in pool.match_triggers(message))
        return round(min(1.0, 0.5 + 0.1 * hits), 2)

    def get_routing_stats(self) -> dict[str, Any]:
        return {
            "total_routes": self.total_routes,
            "pool_usage": dict(self.pool_counts),
            "fallback_routes": self.fallback_routes,
            "errors": self.errors,
            "generated_lines": self.generated_lines,
            "pools": [pool.stats() for pool in self.pools.values()],
        }

    def reset_stats(self) -> None:
        self.total_routes = 0
        self.pool_counts.clear()
        self.fallback_routes = 0
        self.errors = 0
        self.generated_lines = 0
