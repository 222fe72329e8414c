from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    return float(raw)


@dataclass(frozen=True)
class Settings:
    dev_mode: bool = os.getenv("DEV_MODE", "0") == "1"
    rng_seed: int = int(os.getenv("RNG_SEED", "1337"))
    dialogue_backend: str = os.getenv("DIALOGUE_BACKEND", "rules").strip().lower()

    llm_text_backend: str = os.getenv("LLM_TEXT_BACKEND", "stub").strip().lower()
    openrouter_api_key: str | None = os.getenv("OPENROUTER_API_KEY")
    openrouter_model: str = os.getenv("OPENROUTER_MODEL", "openrouter/free")
    openrouter_base_url: str = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1").rstrip("/")
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").rstrip("/")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama3.1")
    llm_max_calls_per_day: int = _env_int("LLM_MAX_CALLS_PER_DAY", 50)
    llm_max_calls_per_user_per_day: int = _env_int("LLM_MAX_CALLS_PER_USER_PER_DAY", 10)
    llm_max_input_chars: int = _env_int("LLM_MAX_INPUT_CHARS", 600)

    short_term_memory_cap: int = _env_int("SHORT_TERM_MEMORY_CAP", 20)
    long_term_memory_cap: int = _env_int("LONG_TERM_MEMORY_CAP", 100)
    action_history_cap: int = _env_int("ACTION_HISTORY_CAP", 50)

    max_queue_size: int = _env_int("MAX_QUEUE_SIZE", 5)
    action_timeout_ms: int = _env_int("ACTION_TIMEOUT_MS", 30_000)

    topic_shift_turns: int = _env_int("TOPIC_SHIFT_TURNS", 8)
    conversation_end_turns: int = _env_int("CONVERSATION_END_TURNS", 15)
    topic_shift_probability: float = _env_float("TOPIC_SHIFT_PROBABILITY", 0.3)
    conversation_end_probability: float = _env_float("CONVERSATION_END_PROBABILITY", 0.2)
    conversation_max_age_ms: int = _env_int("CONVERSATION_MAX_AGE_MS", 3_600_000)
    max_history_messages: int = _env_int("MAX_HISTORY_MESSAGES", 50)
    max_topics: int = _env_int("MAX_TOPICS", 10)
    max_routing_decisions: int = _env_int("MAX_ROUTING_DECISIONS", 20)

    follow_up_probability: float = _env_float("FOLLOW_UP_PROBABILITY", 0.2)
    follow_up_delay_ms: int = _env_int("FOLLOW_UP_DELAY_MS", 3_000)

    @property
    def effective_llm_max_calls_per_day(self) -> int:
        return self.llm_max_calls_per_day * 5 if self.dev_mode else self.llm_max_calls_per_day

    @property
    def effective_llm_max_calls_per_user_per_day(self) -> int:
        return self.llm_max_calls_per_user_per_day * 5 if self.dev_mode else self.llm_max_calls_per_user_per_day

    def redacted(self) -> dict[str, object]:
        return {
            "dev_mode": self.dev_mode,
            "rng_seed": self.rng_seed,
            "dialogue_backend": self.dialogue_backend,
            "llm_text_backend": self.llm_text_backend,
            "openrouter_api_key_set": bool(self.openrouter_api_key),
            "openrouter_model": self.openrouter_model,
            "openrouter_base_url": self.openrouter_base_url,
            "ollama_base_url": self.ollama_base_url,
            "llm_max_calls_per_day": self.effective_llm_max_calls_per_day,
            "llm_max_calls_per_user_per_day": self.effective_llm_max_calls_per_user_per_day,
            "llm_max_input_chars": self.llm_max_input_chars,
            "short_term_memory_cap": self.short_term_memory_cap,
            "long_term_memory_cap": self.long_term_memory_cap,
            "max_queue_size": self.max_queue_size,
            "action_timeout_ms": self.action_timeout_ms,
            "topic_shift_turns": self.topic_shift_turns,
            "conversation_end_turns": self.conversation_end_turns,
            "conversation_max_age_ms": self.conversation_max_age_ms,
        }


def configure_logging(dev_mode: bool) -> None:
    level = logging.DEBUG if dev_mode else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
