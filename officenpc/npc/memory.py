from __future__ import annotations

import logging
import re

from officenpc.models.character import Character, Importance, MemoryEntry, MemoryKind

log = logging.getLogger(__name__)

HIGH_IMPORTANCE_KEYWORDS = (
    "urgent",
    "important",
    "critical",
    "deadline",
    "problem",
    "emergency",
    "asap",
)

EMOTIONAL_KEYWORDS = (
    "happy",
    "sad",
    "angry",
    "excited",
    "frustrated",
    "worried",
    "love",
    "hate",
    "stressed",
    "upset",
    "scared",
    "proud",
    "afraid",
    "nervous",
)

_HIGH_RE = re.compile(r"\b(" + "|".join(HIGH_IMPORTANCE_KEYWORDS) + r")", re.IGNORECASE)
_EMOTIONAL_RE = re.compile(r"\b(" + "|".join(EMOTIONAL_KEYWORDS) + r")", re.IGNORECASE)


def score_importance(content: str) -> Importance:
    if _HIGH_RE.search(content):
        return "high"
    if _EMOTIONAL_RE.search(content):
        return "normal"
    return "low"


def _append_bounded(entries: list[MemoryEntry], entry: MemoryEntry, cap: int) -> list[MemoryEntry]:
    entries.append(entry)
    evicted: list[MemoryEntry] = []
    while len(entries) > max(0, cap):
        evicted.append(entries.pop(0))
    return evicted


def add_memory(
    character: Character,
    content: str,
    *,
    kind: MemoryKind,
    timestamp: int,
    short_term_cap: int = 20,
    long_term_cap: int = 100,
) -> MemoryEntry:
    """Record a memory on the character, promoting high-importance evictions to long-term storage."""
    entry = MemoryEntry(kind=kind, content=content, timestamp=int(timestamp), importance=score_importance(content))
    for evicted in _append_bounded(character.short_term_memory, entry, short_term_cap):
        if evicted.importance != "high":
            continue
        _append_bounded(character.long_term_memory, evicted.model_copy(), long_term_cap)
        log.debug("memory_promoted character=%s content=%s", character.id, evicted.content[:60])
    return entry


def recent_memories(character: Character, limit: int = 5) -> list[MemoryEntry]:
    if limit <= 0:
        return []
    return list(character.short_term_memory[-limit:])
