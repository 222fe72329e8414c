from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from officenpc.config import Settings
from officenpc.engine.events import wall_clock_ms
from officenpc.engine.world import EventSink
from officenpc.models.analysis import MessageAnalysis
from officenpc.models.character import Character
from officenpc.models.conversation import ConversationRecord
from officenpc.npc.analyzer import analyze_incoming_message
from officenpc.npc.conversation import ConversationStateManager, ConversationStore
from officenpc.npc.personality import apply_personality, finalize_response
from officenpc.npc.router import DialogueRouter

log = logging.getLogger(__name__)

SENTIMENT_KEYS = ("very_positive", "positive", "neutral", "negative", "very_negative")
EMERGENCY_BY_TRAIT = {
    "Professional": "I understand your point.",
    "Extroverted": "That's really interesting!",
    "Introverted": "I see.",
}
EMERGENCY_LINES = (
    "I see.",
    "That's interesting.",
    "Tell me more.",
    "I understand.",
    "Good point.",
    "That makes sense.",
    "I hear you.",
    "Thanks for sharing.",
)


class ConversationalDialogueSystem:
    """Analyze -> route -> shape -> thread -> polish, with conversation state kept in ``store``."""

    def __init__(
        self,
        router: DialogueRouter | None = None,
        store: ConversationStore | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], int] | None = None,
        events: EventSink | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.rng = rng or random.Random(self.settings.rng_seed)
        self.clock = clock or wall_clock_ms
        self.router = router or DialogueRouter(rng=self.rng)
        self.store = store or ConversationStore(self.clock)
        self.state = ConversationStateManager(self.settings, self.rng)
        self.events = events
        self.reset_global_stats()

    def generate_response(
        self,
        character: Character,
        incoming_message: str | None,
        speaker: Character | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> str:
        message = (incoming_message or "").strip()
        if not message:
            return self.generate_conversation_starter(character, speaker, context)
        ctx = dict(context or {})
        try:
            now = self.clock()
            analysis = analyze_incoming_message(message)
            record = self.store.get_or_create(character.id, speaker.id if speaker else None)
            self._record(record, speaker or character, message, analysis, now)

            routing = self.router.route(message, character, self.enhance_context_with_history(ctx, record), record)
            self.state.record_routing(record, routing.selected_pool, routing.confidence, now)

            line = apply_personality(routing.response, character, analysis, self.rng)
            line = self.state.apply_threading(line, record, character)
            line = finalize_response(line, character, analysis, self.rng)
            if not line:
                raise ValueError("empty_dialogue_line")

            self._record(record, character, line, analyze_incoming_message(line), now, routed_pool=routing.selected_pool)
            log.debug(
                "dialogue_generated character=%s conversation=%s pool=%s turn=%s state=%s",
                character.id,
                record.id,
                routing.selected_pool,
                record.turn_count,
                record.state,
            )
            return line
        except Exception:
            log.warning("dialogue_failed character=%s fallback=emergency", character.id, exc_info=True)
            return self.emergency_fallback(character)

    def generate_conversation_starter(
        self,
        character: Character,
        target: Character | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> str:
        ctx = dict(context or {})
        try:
            routing = self.router.route("", character, ctx)
            analysis = analyze_incoming_message("")
            line = finalize_response(apply_personality(routing.response, character, analysis, self.rng), character, analysis, self.rng)
        except Exception:
            log.warning("starter_failed character=%s fallback=default", character.id, exc_info=True)
            line = ""
        if not line:
            line = self.default_starter(character, ctx)
        if target is not None:
            record = self.store.get_or_create(character.id, target.id)
            self._record(record, character, line, analyze_incoming_message(line), self.clock(), routed_pool="starter")
        return line

    def default_starter(self, character: Character, context: Mapping[str, Any]) -> str:
        location = str(context.get("location", "")).lower()
        if "break room" in location or "break_room" in location:
            return "Good morning." if character.has_trait("Professional") else "Coffee break time?"
        if "meeting room" in location or "meeting_room" in location:
            return "Ready for the meeting?"
        hour = context.get("hour")
        if hour is None:
            hour = datetime.fromtimestamp(self.clock() / 1000).hour
        if hour < 12:
            return "Good morning! How's it going?" if character.has_trait("Extroverted") else "Morning."
        if hour < 17:
            return "How's your day going?"
        return "Getting close to the end of the day."

    def emergency_fallback(self, character: Character) -> str:
        for trait in character.personality_tags:
            if trait in EMERGENCY_BY_TRAIT:
                return EMERGENCY_BY_TRAIT[trait]
        return self.rng.choice(EMERGENCY_LINES)

    def enhance_context_with_history(self, context: Mapping[str, Any], record: ConversationRecord) -> dict[str, Any]:
        enhanced = dict(context)
        enhanced["conversation"] = {
            "turn_count": record.turn_count,
            "topics": list(record.topics),
            "sentiment": record.sentiment,
            "state": record.state,
            "recent_messages": [entry.message for entry in self.state.recent_messages(record)],
            "is_ongoing": record.turn_count > 1,
            "participant_count": len(record.participants),
        }
        return enhanced

    def _record(
        self,
        record: ConversationRecord,
        speaker: Character,
        message: str,
        analysis: MessageAnalysis,
        now: int,
        routed_pool: str | None = None,
    ) -> None:
        previous = self.state.record_message(
            record,
            speaker_id=speaker.id,
            speaker_name=speaker.name,
            message=message,
            analysis=analysis,
            now=now,
            routed_pool=routed_pool,
            is_response=routed_pool is not None,
        )
        self.total_turns += 1
        if record.turn_count == 1:
            self.total_conversations += 1
        for topic in analysis.topics:
            self.popular_topics[topic] += 1
        self.sentiment_distribution[analysis.sentiment] += 1
        if record.state == "ending" and previous != "ending":
            self.ended_conversations += 1
            total = self.average_conversation_length * (self.ended_conversations - 1) + record.turn_count
            self.average_conversation_length = total / self.ended_conversations

    def get_conversation_stats(self) -> dict[str, Any]:
        records = self.store.records()
        history_sizes = [len(record.history) for record in records]
        return {
            "active_conversations": sum(1 for record in records if record.state == "active"),
            "total_tracked_conversations": len(records),
            "total_turns": self.total_turns,
            "total_conversations": self.total_conversations,
            "average_conversation_length": round(self.average_conversation_length, 2),
            "sentiment_distribution": dict(self.sentiment_distribution),
            "top_topics": [{"topic": topic, "count": count} for topic, count in self.popular_topics.most_common(5)],
            "routing_stats": self.router.get_routing_stats(),
            "memory_usage": {
                "conversation_history_size": sum(history_sizes),
                "average_history_length": round(sum(history_sizes) / len(history_sizes), 2) if history_sizes else 0.0,
            },
        }

    def cleanup_old_conversations(self, max_age_ms: int | None = None) -> list[str]:
        """Evict stale, non-active conversations and trim the survivors. Safe to repeat."""
        max_age = self.settings.conversation_max_age_ms if max_age_ms is None else max_age_ms
        evicted = self.store.evict_stale(max_age, self.clock())
        for record in self.store.records():
            self.state.trim(record)
        if evicted:
            log.info("conversations_evicted count=%s max_age_ms=%s remaining=%s", len(evicted), max_age, len(self.store))
            if self.events is not None:
                self.events.fire_event("CONVERSATIONS_EVICTED", {"conversation_ids": evicted, "count": len(evicted)})
        return evicted

    def reset_global_stats(self) -> None:
        self.total_turns = 0
        self.total_conversations = 0
        self.ended_conversations = 0
        self.average_conversation_length = 0.0
        self.popular_topics: Counter[str] = Counter()
        self.sentiment_distribution: dict[str, int] = dict.fromkeys(SENTIMENT_KEYS, 0)

    def analyze_system_performance(self) -> dict[str, Any]:
        stats = self.get_conversation_stats()
        recommendations: list[str] = []
        if stats["total_tracked_conversations"] > 100:
            recommendations.append("Consider cleaning up old conversations more frequently")
        if self.ended_conversations and self.average_conversation_length < 3:
            recommendations.append("Conversations are very short; consider adjusting conversation flow")
        negative = self.sentiment_distribution["negative"] + self.sentiment_distribution["very_negative"]
        total = sum(self.sentiment_distribution.values())
        if total and negative / total > 0.4:
            recommendations.append("High negative sentiment; consider reviewing response templates")
        return {
            "stats": stats,
            "recommendations": recommendations,
            "system_health": "Good" if not recommendations else "Needs attention",
        }
