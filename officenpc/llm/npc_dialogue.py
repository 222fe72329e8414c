from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from officenpc.llm.client import LLMClient, StubProvider
from officenpc.models.character import Character
from officenpc.models.conversation import ConversationRecord

log = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are roleplaying a coworker in a small office. "
    "Stay in character. Reply with one or two short sentences. "
    "React to what was just said; do not narrate or describe actions."
)
MAX_LINE_CHARS = 240


class LLMLineSource:
    """Asks the language model for a line; ``None`` hands the turn back to the rule pools."""

    def __init__(self, client: LLMClient, *, history_turns: int = 6) -> None:
        self.client = client
        self.history_turns = history_turns

    def generate_line(
        self,
        message: str,
        character: Character,
        context: Mapping[str, Any],
        record: ConversationRecord | None = None,
    ) -> str | None:
        if not message:
            return None
        payload: dict[str, Any] = {
            "name": character.name,
            "job_role": character.job_role,
            "personality": character.personality_tags,
            "mood": character.mood,
            "location": context.get("location"),
            "group_size": context.get("group_size"),
            "message": message,
        }
        if record is not None:
            payload["topics"] = list(record.topics)
            payload["history"] = [
                {"speaker": entry.speaker_name, "message": entry.message} for entry in record.history[-self.history_turns :]
            ]
        data = self.client.complete_text(
            json.dumps(payload, sort_keys=True),
            user_id=character.id,
            system_prompt=SYSTEM_PROMPT,
            temperature=0.7,
        )
        if data.get("error"):
            log.info("llm_line_unavailable character=%s error=%s", character.id, data["error"])
            return None
        text = extract_dialogue_text(str(data.get("text", "")))
        if not text or text.startswith(StubProvider.PREFIX):
            return None
        return text[:MAX_LINE_CHARS]


def extract_dialogue_text(raw: str) -> str:
    text = raw.strip()
    if not text:
        return ""
    parsed = _try_parse_jsonish(text)
    if isinstance(parsed, dict):
        for key in ("message", "reply", "dialogue", "text"):
            value = parsed.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return text.strip('"').strip()


def _try_parse_jsonish(text: str) -> dict[str, Any] | None:
    try:
        data = json.loads(text)
        return data if isinstance(data, dict) else None
    except json.JSONDecodeError:
        pass
    match = re.search(r"\{.*\}", text, flags=re.DOTALL)
    if match:
        try:
            data = json.loads(match.group(0))
            return data if isinstance(data, dict) else None
        except json.JSONDecodeError:
            return None
    return None
