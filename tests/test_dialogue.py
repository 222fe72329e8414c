from __future__ import annotations

import random

from officenpc.config import Settings
from officenpc.engine.events import EventQueue
from officenpc.models.character import Character
from officenpc.npc.dialogue import EMERGENCY_LINES, ConversationalDialogueSystem


class FakeClock:
    def __init__(self, now: int = 1_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


class ExplodingRouter:
    def route(self, *args, **kwargs):
        raise RuntimeError("router offline")

    def get_routing_stats(self) -> dict:
        return {}


def _system(clock: FakeClock | None = None, **kwargs) -> ConversationalDialogueSystem:
    return ConversationalDialogueSystem(settings=Settings(), rng=random.Random(11), clock=clock or FakeClock(), **kwargs)


def _pair() -> tuple[Character, Character]:
    alice = Character(id="alice", name="Alice", personality_tags=["Extroverted"], location="Office Area")
    bob = Character(id="bob", name="Bob", location="Office Area")
    return alice, bob


def test_reply_is_recorded_with_the_incoming_message():
    system = _system()
    alice, bob = _pair()

    line = system.generate_response(alice, "I'm so excited about the game tonight!", bob, {"location": "Office Area"})

    record = system.store.get("alice::bob")
    assert line
    assert line[-1] in ".!?"
    assert record is not None
    assert record.turn_count == 2
    assert [entry.speaker_id for entry in record.history] == ["bob", "alice"]
    assert record.history[-1].routed_pool == "sports"
    assert record.routing_history[-1].pool == "sports"
    assert "sports" in record.topics


def test_history_is_exposed_to_pools():
    system = _system()
    alice, bob = _pair()
    system.generate_response(alice, "Lunch later?", bob)
    record = system.store.get("alice::bob")

    enhanced = system.enhance_context_with_history({"location": "Break Room"}, record)

    assert enhanced["location"] == "Break Room"
    assert enhanced["conversation"]["turn_count"] == 2
    assert enhanced["conversation"]["is_ongoing"] is True
    assert enhanced["conversation"]["recent_messages"][0] == "Lunch later?"


def test_empty_message_produces_a_starter():
    system = _system()
    alice, bob = _pair()

    line = system.generate_response(alice, "   ", bob, {"location": "Office Area", "hour": 10})

    record = system.store.get("alice::bob")
    assert line
    assert record.turn_count == 1
    assert record.history[0].routed_pool == "starter"


def test_default_starter_uses_location_then_hour():
    system = _system()
    professional = Character(id="p", name="Pat", personality_tags=["Professional"])

    assert system.default_starter(professional, {"location": "Break Room"}) == "Good morning."
    assert system.default_starter(professional, {"location": "Meeting Room"}) == "Ready for the meeting?"
    assert system.default_starter(professional, {"hour": 14}) == "How's your day going?"
    assert system.default_starter(professional, {"hour": 20}) == "Getting close to the end of the day."


def test_failures_degrade_to_emergency_lines():
    system = _system(router=ExplodingRouter())
    alice, bob = _pair()

    professional = Character(id="p", name="Pat", personality_tags=["Professional"])
    assert system.generate_response(professional, "Status?", bob) == "I understand your point."
    assert system.generate_response(bob, "Status?", alice) in EMERGENCY_LINES


def test_cleanup_is_idempotent_and_spares_active_conversations():
    clock = FakeClock()
    events = EventQueue(clock)
    system = _system(clock, events=events)
    alice, bob = _pair()
    carol = Character(id="carol", name="Carol")

    system.generate_response(alice, "Bye, talk later!", bob)
    system.generate_response(alice, "Did you finish the report?", carol)
    assert system.store.get("alice::bob").state == "ending"

    clock.now += Settings().conversation_max_age_ms + 1
    assert system.cleanup_old_conversations() == ["alice::bob"]
    assert system.cleanup_old_conversations() == []
    assert system.store.get("alice::carol") is not None
    assert [event.event_type for event in events.drain()] == ["CONVERSATIONS_EVICTED"]


def test_stats_and_performance_report():
    system = _system()
    alice, bob = _pair()

    assert system.analyze_system_performance()["system_health"] == "Good"

    system.generate_response(alice, "Bye, talk later!", bob)
    report = system.analyze_system_performance()
    stats = report["stats"]

    assert stats["total_turns"] == 2
    assert stats["total_conversations"] == 1
    assert stats["average_conversation_length"] == 1.0
    assert stats["routing_stats"]["total_routes"] == 1
    assert report["system_health"] == "Needs attention"
    assert any("short" in rec for rec in report["recommendations"])

    system.reset_global_stats()
    assert system.get_conversation_stats()["total_turns"] == 0
