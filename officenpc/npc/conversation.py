from __future__ import annotations

import logging
import random
import re
from collections.abc import Callable, Iterator

from officenpc.config import Settings
from officenpc.engine.events import wall_clock_ms
from officenpc.models.analysis import MessageAnalysis
from officenpc.models.character import Character
from officenpc.models.conversation import ConversationRecord, ConversationState, HistoryEntry, RoutingDecision
from officenpc.npc.personality import sign_off

log = logging.getLogger(__name__)

TOPIC_REFERENCES = {
    "work": "Speaking of work,",
    "food": "About food though,",
    "social": "On the social side,",
    "technology": "Tech-wise,",
}
TOPIC_CONTINUITY_TRAITS = ("Professional", "Organized")
TOPIC_CONTINUITY_PROBABILITY = 0.3
TOPIC_SHIFT_PHRASES = ("By the way,", "Speaking of which,", "That reminds me,", "On a different note,", "Actually,")
NEW_TOPICS = ("did you see that email?", "how was your weekend?", "any lunch plans?", "this weather is something.")


def conversation_id(first: str, second: str | None = None) -> str:
    """Stable id for an unordered pair of participants, or a solo id for monologue."""
    if second is None or second == first:
        return first
    return "::".join(sorted((first, second)))


class ConversationStore:
    """Owns every conversation record; callers never keep records past a call."""

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self.clock = clock or wall_clock_ms
        self._records: dict[str, ConversationRecord] = {}

    def create(self, first: str, second: str | None = None) -> ConversationRecord:
        now = self.clock()
        participants = [first] if second is None or second == first else sorted((first, second))
        record = ConversationRecord(
            id=conversation_id(first, second),
            participants=participants,
            start_time=now,
            last_activity=now,
        )
        self._records[record.id] = record
        log.debug("conversation_created id=%s", record.id)
        return record

    def get(self, record_id: str) -> ConversationRecord | None:
        return self._records.get(record_id)

    def get_or_create(self, first: str, second: str | None = None) -> ConversationRecord:
        existing = self._records.get(conversation_id(first, second))
        if existing is not None:
            return existing
        return self.create(first, second)

    def evict(self, record_id: str) -> bool:
        return self._records.pop(record_id, None) is not None

    def evict_stale(self, max_age_ms: int, now: int | None = None) -> list[str]:
        """Remove records idle longer than ``max_age_ms`` unless they are still active."""
        cutoff = (self.clock() if now is None else now) - max_age_ms
        stale = [
            record.id
            for record in self._records.values()
            if record.last_activity < cutoff and record.state != "active"
        ]
        for record_id in stale:
            del self._records[record_id]
        return stale

    def records(self) -> list[ConversationRecord]:
        return list(self._records.values())

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ConversationRecord]:
        return iter(list(self._records.values()))


class ConversationStateManager:
    def __init__(self, settings: Settings | None = None, rng: random.Random | None = None) -> None:
        self.settings = settings or Settings()
        self.rng = rng or random.Random(0)

    def evaluate_state(self, record: ConversationRecord, latest_is_ender: bool = False) -> ConversationState:
        """``record.topics`` never holds "general", so an empty list means small talk only
        and counts as a single topic for exhaustion."""
        if latest_is_ender:
            return "ending"
        if record.turn_count > self.settings.conversation_end_turns:
            return "winding_down"
        if record.turn_count > self.settings.topic_shift_turns and len(record.topics) <= 1:
            return "topic_exhausted"
        return "active"

    def record_message(
        self,
        record: ConversationRecord,
        *,
        speaker_id: str,
        speaker_name: str,
        message: str,
        analysis: MessageAnalysis,
        now: int,
        routed_pool: str | None = None,
        is_response: bool = False,
    ) -> ConversationState:
        """Append one message and re-evaluate the lifecycle; returns the previous state."""
        previous = record.state
        record.turn_count += 1
        record.last_activity = now
        record.last_speaker = speaker_id
        for topic in analysis.topics:
            if topic == "general":
                continue
            if topic in record.topics:
                record.topics.remove(topic)
            record.topics.append(topic)
        del record.topics[: max(0, len(record.topics) - self.settings.max_topics)]
        if analysis.sentiment != "neutral":
            record.sentiment = analysis.sentiment
        record.history.append(
            HistoryEntry(
                speaker_id=speaker_id,
                speaker_name=speaker_name,
                message=message,
                timestamp=now,
                turn_number=record.turn_count,
                message_type=analysis.message_type,
                topics=list(analysis.topics),
                sentiment=analysis.sentiment,
                routed_pool=routed_pool,
                is_response=is_response,
            )
        )
        del record.history[: max(0, len(record.history) - self.settings.max_history_messages)]
        if not (is_response and record.state == "ending"):
            latest_is_ender = analysis.message_type == "conversation_ender" and not is_response
            record.state = self.evaluate_state(record, latest_is_ender)
        if record.state != previous:
            log.debug("conversation_state id=%s from=%s to=%s turn=%s", record.id, previous, record.state, record.turn_count)
        return previous

    def record_routing(self, record: ConversationRecord, pool: str, confidence: float, now: int) -> None:
        record.routing_history.append(RoutingDecision(turn=record.turn_count, pool=pool, confidence=confidence, timestamp=now))
        del record.routing_history[: max(0, len(record.routing_history) - self.settings.max_routing_decisions)]

    def trim(self, record: ConversationRecord) -> None:
        del record.history[: max(0, len(record.history) - self.settings.max_history_messages)]
        del record.topics[: max(0, len(record.topics) - self.settings.max_topics)]
        del record.routing_history[: max(0, len(record.routing_history) - self.settings.max_routing_decisions)]

    def apply_threading(self, line: str, record: ConversationRecord, character: Character) -> str:
        threaded = self._topic_continuity(line, record, character)
        return self._conversation_flow(threaded, record, character)

    def _topic_continuity(self, line: str, record: ConversationRecord, character: Character) -> str:
        if not record.topics or not character.has_trait(*TOPIC_CONTINUITY_TRAITS):
            return line
        if any(re.search(rf"\b{re.escape(topic)}", line, re.IGNORECASE) for topic in record.topics):
            return line
        reference = TOPIC_REFERENCES.get(record.topics[-1])
        if reference is None or self.rng.random() >= TOPIC_CONTINUITY_PROBABILITY:
            return line
        return f"{reference} {line[:1].lower()}{line[1:]}"

    def _conversation_flow(self, line: str, record: ConversationRecord, character: Character) -> str:
        turns = record.turn_count
        if turns > self.settings.conversation_end_turns and self.rng.random() < self.settings.conversation_end_probability:
            return f"{line} {sign_off(character, self.rng)}"
        if turns > self.settings.topic_shift_turns and self.rng.random() < self.settings.topic_shift_probability:
            return f"{line} {self.rng.choice(TOPIC_SHIFT_PHRASES)} {self.rng.choice(NEW_TOPICS)}"
        return line

    def recent_messages(self, record: ConversationRecord, count: int = 3) -> list[HistoryEntry]:
        return record.history[-count:]
