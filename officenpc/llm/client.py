from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime

import requests

from officenpc.config import Settings

log = logging.getLogger(__name__)


class ProviderUnavailableError(RuntimeError):
    pass


class OpenRouter404Error(RuntimeError):
    pass


class BaseProvider(ABC):
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.max_input_chars = settings.llm_max_input_chars

    def _truncate(self, text: str) -> str:
        return text[: self.max_input_chars]

    def _messages(self, system_prompt: str | None, user_prompt: str) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": self._truncate(system_prompt)})
        messages.append({"role": "user", "content": self._truncate(user_prompt)})
        return messages

    @abstractmethod
    def generate_text(
        self,
        system_prompt: str | None,
        user_prompt: str,
        *,
        temperature: float = 0.7,
    ) -> str:
        raise NotImplementedError


class StubProvider(BaseProvider):
    """Offline provider; its output is recognisable so callers can ignore it."""

    PREFIX = "[stub]"

    def generate_text(
        self,
        system_prompt: str | None,
        user_prompt: str,
        *,
        temperature: float = 0.7,
    ) -> str:
        del system_prompt, temperature
        return f"{self.PREFIX} {self._truncate(user_prompt)[:80]}"


class OpenRouterProvider(BaseProvider):
    def _headers(self) -> dict[str, str]:
        api_key = self.settings.openrouter_api_key
        if not api_key:
            raise ProviderUnavailableError("openrouter_missing_api_key")
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": "http://localhost",
            "X-Title": "officenpc",
        }

    def generate_text(
        self,
        system_prompt: str | None,
        user_prompt: str,
        *,
        temperature: float = 0.7,
    ) -> str:
        payload = {
            "model": self.settings.openrouter_model,
            "messages": self._messages(system_prompt, user_prompt),
            "temperature": temperature,
        }
        response = requests.post(
            f"{self.settings.openrouter_base_url}/chat/completions",
            headers=self._headers(),
            data=json.dumps(payload),
            timeout=20,
        )
        if response.status_code == 404:
            raise OpenRouter404Error("OpenRouter request returned 404. Check OPENROUTER_MODEL and OPENROUTER_BASE_URL.")
        if response.status_code in {401, 429} or response.status_code >= 500:
            raise ProviderUnavailableError(f"openrouter_http_{response.status_code}")
        response.raise_for_status()
        content = response.json()["choices"][0]["message"]["content"]
        if not isinstance(content, str):
            raise ProviderUnavailableError("unexpected_chat_content_type")
        return content.strip()


class OllamaProvider(BaseProvider):
    def generate_text(
        self,
        system_prompt: str | None,
        user_prompt: str,
        *,
        temperature: float = 0.7,
    ) -> str:
        payload = {
            "model": self.settings.ollama_model,
            "messages": self._messages(system_prompt, user_prompt),
            "stream": False,
            "options": {"temperature": temperature},
        }
        response = requests.post(
            f"{self.settings.ollama_base_url}/api/chat",
            headers={"Content-Type": "application/json"},
            data=json.dumps(payload),
            timeout=20,
        )
        response.raise_for_status()
        message = response.json().get("message", {})
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise ProviderUnavailableError("ollama_unexpected_response")
        return content.strip()


class LLMClient:
    """Text completion behind a per-day call budget. Never raises; failures come back as ``error``."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._usage: dict[tuple[str, str], int] = {}
        self._stub = StubProvider(settings)
        self._providers: dict[str, BaseProvider] = {
            "stub": self._stub,
            "openrouter": OpenRouterProvider(settings),
            "ollama": OllamaProvider(settings),
        }

    @property
    def backend(self) -> str:
        return self._select_backend(self.settings.llm_text_backend)

    def complete_text(
        self,
        prompt: str,
        user_id: str = "system",
        *,
        system_prompt: str | None = None,
        temperature: float = 0.7,
    ) -> dict[str, str]:
        safe_prompt = prompt[: self.settings.llm_max_input_chars]
        backend = self.backend
        provider = self._providers[backend]
        if backend != "stub":
            ok, reason = self._consume_budget(user_id)
            if not ok:
                log.warning("llm_budget_exhausted backend=%s reason=%s", backend, reason)
                return {"text": "", "error": "budget_exhausted"}
        try:
            text = provider.generate_text(system_prompt, safe_prompt, temperature=temperature).strip()
        except OpenRouter404Error as exc:
            log.warning("openrouter_http_404 detail=%s", str(exc))
            return {"text": "", "error": "openrouter_404"}
        except Exception:
            log.warning("text_provider_failed backend=%s", backend, exc_info=True)
            return {"text": "", "error": "provider_failed"}
        return {"text": text, "backend": backend}

    def _select_backend(self, backend: str) -> str:
        normalized = (backend or "").strip().lower()
        if normalized in self._providers:
            return normalized
        return "stub"

    def _consume_budget(self, user_id: str) -> tuple[bool, str | None]:
        day = datetime.now(UTC).date().isoformat()
        max_day = self.settings.effective_llm_max_calls_per_day
        max_user = self.settings.effective_llm_max_calls_per_user_per_day
        global_calls = sum(count for (d, _), count in self._usage.items() if d == day)
        user_calls = self._usage.get((day, user_id), 0)
        if global_calls >= max_day:
            return False, "global_limit"
        if user_calls >= max_user:
            return False, "user_limit"
        self._usage[(day, user_id)] = user_calls + 1
        return True, None
