from __future__ import annotations

from officenpc.config import Settings
from officenpc.llm.client import LLMClient
from officenpc.llm.npc_dialogue import LLMLineSource, extract_dialogue_text
from officenpc.models.character import Character


class FakeResponse:
    def __init__(self, status_code: int, payload: dict):
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self) -> None:
        return None

    def json(self) -> dict:
        return self._payload


class FakeRequests:
    def __init__(self, content: str = "Sounds like a plan.") -> None:
        self.calls = 0
        self.content = content
        self.last_url = ""

    def post(self, url, *args, **kwargs) -> FakeResponse:
        self.calls += 1
        self.last_url = url
        return FakeResponse(200, {"choices": [{"message": {"content": self.content}}], "message": {"content": self.content}})


class FakeRequests404:
    def post(self, *args, **kwargs) -> FakeResponse:
        return FakeResponse(404, {"error": {"message": "No route or model found"}})


class FakeClient:
    def __init__(self, data: dict) -> None:
        self.data = data
        self.prompts: list[str] = []

    def complete_text(self, prompt: str, user_id: str = "system", **kwargs) -> dict:
        self.prompts.append(prompt)
        return self.data


def _openrouter(**overrides) -> Settings:
    return Settings(**{"llm_text_backend": "openrouter", "openrouter_api_key": "test-key", "dev_mode": False, **overrides})


def test_stub_backend_never_calls_network(monkeypatch):
    fake_requests = FakeRequests()
    monkeypatch.setattr("officenpc.llm.client.requests", fake_requests)
    client = LLMClient(Settings(llm_text_backend="stub"))

    result = client.complete_text("hello world", user_id="u1")

    assert fake_requests.calls == 0
    assert result["text"].startswith("[stub]")


def test_unknown_backend_falls_back_to_stub():
    assert LLMClient(Settings(llm_text_backend="carrier-pigeon")).backend == "stub"


def test_openrouter_returns_text(monkeypatch):
    fake_requests = FakeRequests()
    monkeypatch.setattr("officenpc.llm.client.requests", fake_requests)
    client = LLMClient(_openrouter())

    result = client.complete_text("hello", user_id="u1")

    assert result == {"text": "Sounds like a plan.", "backend": "openrouter"}
    assert fake_requests.last_url.endswith("/chat/completions")


def test_openrouter_missing_key_is_reported_without_network(monkeypatch):
    fake_requests = FakeRequests()
    monkeypatch.setattr("officenpc.llm.client.requests", fake_requests)
    client = LLMClient(_openrouter(openrouter_api_key=None))

    result = client.complete_text("hello", user_id="u1")

    assert fake_requests.calls == 0
    assert result["error"] == "provider_failed"


def test_openrouter_404_is_reported(monkeypatch):
    monkeypatch.setattr("officenpc.llm.client.requests", FakeRequests404())
    client = LLMClient(_openrouter())

    assert client.complete_text("hello")["error"] == "openrouter_404"


def test_daily_budget_is_enforced(monkeypatch):
    fake_requests = FakeRequests()
    monkeypatch.setattr("officenpc.llm.client.requests", fake_requests)
    client = LLMClient(_openrouter(llm_max_calls_per_day=5, llm_max_calls_per_user_per_day=1))

    assert "error" not in client.complete_text("one", user_id="u1")
    assert client.complete_text("two", user_id="u1")["error"] == "budget_exhausted"
    assert "error" not in client.complete_text("three", user_id="u2")
    assert fake_requests.calls == 2


def test_ollama_chat(monkeypatch):
    fake_requests = FakeRequests("Sure thing.")
    monkeypatch.setattr("officenpc.llm.client.requests", fake_requests)
    client = LLMClient(Settings(llm_text_backend="ollama", dev_mode=False))

    assert client.complete_text("hi")["text"] == "Sure thing."
    assert fake_requests.last_url.endswith("/api/chat")


def test_extract_dialogue_text_handles_jsonish_output():
    assert extract_dialogue_text('{"reply": "Coffee first, then the report."}') == "Coffee first, then the report."
    assert extract_dialogue_text('Here you go: {"message": "On it."}') == "On it."
    assert extract_dialogue_text('"Plain line."') == "Plain line."
    assert extract_dialogue_text("   ") == ""


def test_line_source_uses_model_text():
    client = FakeClient({"text": '{"message": "I saw it, what a finish!"}'})
    source = LLMLineSource(client)
    character = Character(id="a", name="Alice", personality_tags=["Extroverted"])

    line = source.generate_line("Did you see the game?", character, {"location": "Break Room"})

    assert line == "I saw it, what a finish!"
    assert '"location": "Break Room"' in client.prompts[0]


def test_line_source_defers_on_stub_error_or_starter():
    character = Character(id="a", name="Alice")

    assert LLMLineSource(FakeClient({"text": "[stub] hello"})).generate_line("hi", character, {}) is None
    assert LLMLineSource(FakeClient({"text": "", "error": "budget_exhausted"})).generate_line("hi", character, {}) is None
    assert LLMLineSource(FakeClient({"text": "Hello!"})).generate_line("", character, {}) is None
