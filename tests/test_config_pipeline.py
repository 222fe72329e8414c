from __future__ import annotations

from officenpc.config import Settings
from officenpc.llm.npc_dialogue import LLMLineSource
from officenpc.main import build_pipeline
from officenpc.models.character import Character


def test_redacted_settings_hide_secrets():
    settings = Settings(openrouter_api_key="sk-secret", dev_mode=False)

    redacted = settings.redacted()

    assert "sk-secret" not in str(redacted)
    assert redacted["openrouter_api_key_set"] is True


def test_dev_mode_raises_llm_budgets():
    settings = Settings(dev_mode=True, llm_max_calls_per_day=10, llm_max_calls_per_user_per_day=2)

    assert settings.effective_llm_max_calls_per_day == 50
    assert settings.effective_llm_max_calls_per_user_per_day == 10


def test_rules_pipeline_has_no_line_source():
    pipeline = build_pipeline(Settings(dialogue_backend="rules"))

    assert pipeline.dialogue.router.line_source is None
    assert pipeline.processor.dialogue is pipeline.dialogue
    assert pipeline.processor.registry is pipeline.world


def test_llm_pipeline_falls_back_to_rules_with_stub_backend():
    pipeline = build_pipeline(Settings(dialogue_backend="llm", llm_text_backend="stub", follow_up_probability=0.0))
    alice = pipeline.world.add_character(Character(id="alice", name="Alice", location="Office Area"))
    bob = pipeline.world.add_character(Character(id="bob", name="Bob", location="Office Area"))

    assert isinstance(pipeline.dialogue.router.line_source, LLMLineSource)
    assert pipeline.processor.process_response(alice, {"response_type": "DIALOGUE", "content": "Lunch today?", "target": "bob"})
    assert alice.last_utterance
    assert not alice.last_utterance.startswith("[stub]")
    assert pipeline.dialogue.router.generated_lines == 0
    assert [event.event_type for event in pipeline.events.drain()] == ["CHARACTER_DIALOGUE"]
    assert bob.conversation_partner_id is None
