from __future__ import annotations

import random

from officenpc.config import Settings
from officenpc.engine.events import EventQueue
from officenpc.engine.processor import ResponseProcessor
from officenpc.engine.world import OfficeWorld
from officenpc.models.character import Character, Task
from officenpc.models.intents import AIResponse
from officenpc.npc.context import gather_context


class FakeClock:
    def __init__(self, now: int = 1_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


class StuckMovement:
    def move_character_to(self, character, target: str) -> bool:
        return False


def _processor(clock: FakeClock, **settings_overrides) -> tuple[ResponseProcessor, EventQueue]:
    settings = Settings(**{"follow_up_probability": 0.0, **settings_overrides})
    events = EventQueue(clock)
    processor = ResponseProcessor(events=events, settings=settings, clock=clock, rng=random.Random(5))
    return processor, events


def _worker(*traits: str) -> Character:
    return Character(
        id="alice",
        name="Alice",
        personality_tags=list(traits),
        location="Office Area",
        assigned_task=Task(id="report", name="Quarterly report", required_location="Office Area"),
    )


def _event_types(events: EventQueue) -> list[str]:
    return [event.event_type for event in events.drain()]


def _action(action_type: str, **fields) -> dict:
    return {"response_type": "ACTION", "action": {"type": action_type, **fields}}


def test_work_action_commits_state_and_completes_later():
    clock = FakeClock()
    processor, events = _processor(clock)
    alice = _worker()

    assert processor.process_response(alice, _action("WORK_ON", target="report")) is True

    assert alice.is_busy is True
    assert alice.current_action.type == "WORK_ON"
    assert alice.current_action.duration == 15_000
    assert alice.assigned_task.progress == 10.0
    assert alice.needs.energy == 7.0
    assert alice.action_history[-1].need_deltas["energy"] == -1.0
    assert _event_types(events) == ["CHARACTER_ACTION"]

    clock.now += 15_000
    processor.tick()

    assert alice.is_busy is False
    assert alice.current_action is None
    assert alice.action_state == "idle"
    assert _event_types(events) == ["ACTION_COMPLETED"]


def test_busy_character_queues_exactly_one_action_per_conflict():
    clock = FakeClock()
    processor, events = _processor(clock, max_queue_size=2)
    alice = _worker()
    processor.process_response(alice, _action("WORK_ON"))
    events.drain()
    energy = alice.needs.energy

    assert processor.process_response(alice, _action("DRINK_COFFEE")) is True
    assert len(alice.action_queue) == 1
    assert alice.needs.energy == energy
    assert alice.current_action.type == "WORK_ON"

    assert processor.process_response(alice, _action("EAT_SNACK")) is True
    assert len(alice.action_queue) == 2

    assert processor.process_response(alice, _action("SOCIALIZE")) is False
    assert len(alice.action_queue) == 2
    assert _event_types(events) == ["ACTION_QUEUED", "ACTION_QUEUED", "ACTION_REJECTED"]
    assert processor.get_stats()["rejected"] == 1


def test_queue_drains_in_order_when_the_action_completes():
    clock = FakeClock()
    processor, _ = _processor(clock)
    alice = _worker()
    alice.needs.energy = 4
    processor.process_response(alice, _action("WORK_ON", duration=1_000))
    processor.process_response(alice, _action("DRINK_COFFEE"))

    clock.now += 1_000
    processor.tick()

    assert alice.current_action.type == "DRINK_COFFEE"
    assert alice.action_queue == []
    assert alice.needs.energy == 6.0
    assert [entry.type for entry in alice.action_history] == ["WORK_ON", "DRINK_COFFEE"]


def test_critical_priority_preempts_current_action():
    clock = FakeClock()
    processor, _ = _processor(clock)
    alice = _worker()
    processor.process_response(alice, _action("WORK_ON"))

    assert processor.process_response(alice, _action("DRINK_COFFEE", priority="critical")) is True

    assert alice.current_action.type == "DRINK_COFFEE"
    assert alice.action_queue == []
    assert len(processor.scheduler.pending(alice.id, "action_complete")) == 1


def test_malformed_responses_are_rejected_without_state_change():
    clock = FakeClock()
    processor, events = _processor(clock)
    alice = _worker()
    before = alice.model_dump()

    assert processor.process_response(alice, None) is False
    assert processor.process_response(alice, {"response_type": "DANCE"}) is False
    assert processor.process_response(alice, {"response_type": "ACTION"}) is False
    assert processor.process_response(alice, {"response_type": "DIALOGUE"}) is False
    assert processor.process_response(alice, _action("WORK_ON", duration=-5)) is False

    assert alice.model_dump() == before
    assert events.pending() == 0
    stats = processor.get_stats()
    assert stats["malformed"] == 5
    assert stats["failed"] == 5
    assert stats["success_rate"] == 0.0


def test_validation_failure_degrades_to_idle():
    clock = FakeClock()
    processor, events = _processor(clock)
    alice = _worker()
    alice.assigned_task = None

    assert processor.process_response(alice, _action("WORK_ON")) is False

    assert alice.is_busy is False
    assert alice.action_history == []
    assert _event_types(events) == ["ACTION_FAILED", "CHARACTER_IDLE"]


def test_unsuitable_location_is_a_validation_failure():
    clock = FakeClock()
    processor, _ = _processor(clock)
    alice = _worker()
    alice.location = "Bathroom"

    assert processor.process_response(alice, _action("DRINK_COFFEE")) is False
    assert alice.needs.energy == 8.0


def test_execution_failure_clears_busy_and_falls_back_to_dialogue():
    clock = FakeClock()
    events = EventQueue(clock)
    processor = ResponseProcessor(
        movement=StuckMovement(),
        events=events,
        settings=Settings(follow_up_probability=0.0),
        clock=clock,
        rng=random.Random(5),
    )
    alice = _worker()
    decision = {
        "response_type": "ACTION",
        "action": {"type": "MOVE_TO", "target": "Break Room"},
        "content": "Anyone want coffee?",
    }

    assert processor.process_response(alice, decision) is False

    assert alice.is_busy is False
    assert alice.location == "Office Area"
    assert alice.action_history == []
    assert alice.last_utterance
    assert _event_types(events) == ["ACTION_FAILED", "CHARACTER_DIALOGUE"]


def test_execution_failure_without_content_goes_idle():
    clock = FakeClock()
    events = EventQueue(clock)
    processor = ResponseProcessor(movement=StuckMovement(), events=events, clock=clock, rng=random.Random(5))
    alice = _worker()

    assert processor.process_response(alice, _action("MOVE_TO", target="Break Room")) is False
    assert _event_types(events) == ["ACTION_FAILED", "CHARACTER_IDLE"]


def test_timed_out_action_is_force_cleared_and_not_retried():
    clock = FakeClock()
    processor, events = _processor(clock, action_timeout_ms=30_000)
    alice = _worker()
    processor.process_response(alice, _action("WORK_ON", duration=60_000))
    events.drain()

    clock.now += 29_999
    assert processor.sweep_action_timeouts() == []

    clock.now += 1
    assert processor.sweep_action_timeouts() == ["alice"]
    assert alice.is_busy is False
    assert alice.assigned_task.progress == 10.0
    assert processor.scheduler.pending(alice.id, "action_complete") == []
    assert _event_types(events) == ["ACTION_TIMED_OUT"]
    assert processor.sweep_action_timeouts() == []


def test_idle_decision_succeeds_and_clears_busy():
    clock = FakeClock()
    processor, events = _processor(clock)
    alice = _worker()
    processor.process_response(alice, _action("WORK_ON"))
    events.drain()

    assert processor.process_response(alice, {"response_type": "IDLE", "thought": "Time for a breather."}) is True

    assert alice.is_busy is False
    assert processor.scheduler.pending(alice.id, "action_complete") == []
    assert _event_types(events) == ["CHARACTER_IDLE"]
    assert alice.short_term_memory[-1].kind == "thought"


def test_mixed_response_runs_action_and_dialogue_in_a_world():
    clock = FakeClock()
    world = OfficeWorld()
    alice = world.add_character(_worker())
    world.add_character(Character(id="bob", name="Bob", location="Office Area"))
    events = EventQueue(clock)
    processor = ResponseProcessor(
        world=world,
        events=events,
        settings=Settings(follow_up_probability=0.0),
        clock=clock,
        rng=random.Random(5),
    )
    decision = AIResponse(
        response_type="MIXED",
        action={"type": "WORK_ON", "target": "report"},
        content="How is the report going?",
        target="bob",
        thought="I should finish the report before lunch.",
    )

    assert processor.process_response(alice, decision, gather_context(alice, world, now=clock())) is True

    assert alice.is_busy is True
    assert alice.conversation_partner_id == "bob"
    assert alice.last_utterance
    kinds = [entry.kind for entry in alice.short_term_memory]
    assert kinds == ["dialogue", "thought"]
    assert _event_types(events) == ["CHARACTER_ACTION", "CHARACTER_DIALOGUE"]
    assert processor.dialogue.store.get("alice::bob").turn_count == 2


def test_move_uses_the_world_and_validates_locations():
    clock = FakeClock()
    world = OfficeWorld()
    alice = world.add_character(_worker())
    processor = ResponseProcessor(world=world, settings=Settings(follow_up_probability=0.0), clock=clock)

    assert processor.process_response(alice, _action("MOVE_TO", target="Rooftop")) is False
    assert processor.process_response(alice, _action("MOVE_TO", target="Break Room")) is True
    assert alice.location == "Break Room"
    assert world.positions["alice"] == world.locations["Break Room"]


def test_character_outside_the_world_still_completes_and_drains():
    clock = FakeClock()
    world = OfficeWorld()
    world.add_character(Character(id="dave", name="Dave", location="Break Room"))
    processor = ResponseProcessor(world=world, settings=Settings(follow_up_probability=0.0), clock=clock)
    carol = Character(id="carol", name="Carol", location="Break Room")

    assert processor.process_response(carol, _action("DRINK_COFFEE")) is True
    assert processor.process_response(carol, _action("EAT_SNACK")) is True
    assert [c.id for c in processor.get_characters_in_location("Break Room")] == ["dave", "carol"]
    assert processor.process_response(carol, _action("START_CONVERSATION", target="dave", priority="critical")) is True

    clock.now += 10_000
    processor.tick()

    assert carol.current_action.type == "EAT_SNACK"
    assert carol.action_queue == []

    clock.now += 8_000
    processor.tick()

    assert carol.is_busy is False
    assert carol.action_state == "idle"


def test_mixed_response_without_action_only_speaks():
    clock = FakeClock()
    processor, events = _processor(clock)
    alice = _worker()

    decision = AIResponse(response_type="MIXED", content="Morning!")

    assert processor.process_response(alice, decision) is True
    assert alice.is_busy is False
    assert alice.last_utterance
    assert processor.get_stats()["by_action_type"] == {}
    assert _event_types(events) == ["CHARACTER_DIALOGUE"]


def test_character_removed_from_world_loses_pending_work():
    clock = FakeClock()
    world = OfficeWorld()
    alice = world.add_character(_worker())
    processor = ResponseProcessor(world=world, settings=Settings(follow_up_probability=0.0), clock=clock)
    processor.process_response(alice, _action("DRINK_COFFEE"))

    world.remove_character("alice")
    clock.now += 8_000
    processor.tick()

    assert processor.get_character("alice") is None
    assert alice.is_busy is True


def test_follow_up_is_skipped_while_busy():
    clock = FakeClock()
    processor, events = _processor(clock, follow_up_probability=1.0, follow_up_delay_ms=1_000)
    gossip = _worker("Gossip")

    assert processor.process_response(gossip, {"response_type": "DIALOGUE", "content": "Did you hear about the new hire?"}) is True
    first_line = gossip.last_utterance
    gossip.is_busy = True
    events.drain()

    clock.now += 1_000
    processor.tick()

    assert gossip.last_utterance == first_line
    assert "FOLLOW_UP_DIALOGUE" not in _event_types(events)


def test_follow_up_is_delivered_when_free():
    clock = FakeClock()
    processor, events = _processor(clock, follow_up_probability=1.0, follow_up_delay_ms=1_000)
    gossip = _worker("Gossip")
    processor.process_response(gossip, {"response_type": "DIALOGUE", "content": "Did you hear about the new hire?"})
    events.drain()

    clock.now += 1_000
    processor.tick()

    assert gossip.last_utterance == "You didn't hear it from me though!"
    assert _event_types(events) == ["FOLLOW_UP_DIALOGUE"]


def test_removed_character_loses_pending_work():
    clock = FakeClock()
    processor, _ = _processor(clock)
    alice = _worker()
    processor.process_response(alice, _action("WORK_ON"))

    processor.remove_character("alice")
    clock.now += 60_000
    processor.tick()

    assert processor.scheduler.pending("alice") == []
    assert alice.is_busy is True


def test_stats_track_types_and_reset():
    clock = FakeClock()
    processor, _ = _processor(clock)
    alice = _worker()
    processor.process_response(alice, _action("WORK_ON"))
    processor.process_response(alice, {"response_type": "DIALOGUE", "content": "Quick question about lunch"})
    processor.process_response(alice, None)

    stats = processor.get_stats()
    assert stats["total_processed"] == 3
    assert stats["successful"] == 2
    assert stats["success_rate"] == 0.667
    assert stats["by_response_type"] == {"ACTION": 1, "DIALOGUE": 1}
    assert stats["by_action_type"] == {"WORK_ON": 1}

    processor.reset_stats()
    assert processor.get_stats()["total_processed"] == 0
