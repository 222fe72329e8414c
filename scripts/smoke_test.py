from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from officenpc.config import Settings
from officenpc.main import build_pipeline
from officenpc.models.character import Character, Task
from officenpc.npc.context import gather_context


class ManualClock:
    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


def run() -> None:
    settings = Settings(dialogue_backend="rules", follow_up_probability=0.0)
    pipeline = build_pipeline(settings)
    clock = ManualClock(1_000_000)
    pipeline.processor.clock = clock
    pipeline.processor.scheduler.clock = clock

    alice = pipeline.world.add_character(
        Character(
            id="alice",
            name="Alice",
            personality_tags=["Professional"],
            location="Office Area",
            assigned_task=Task(id="report", name="Report", required_location="Office Area"),
        )
    )
    bob = pipeline.world.add_character(Character(id="bob", name="Bob", personality_tags=["Chaotic"], location="Office Area"))

    reply = pipeline.dialogue.generate_response(alice, "Any news on the client deadline?", bob)
    assert reply
    assert pipeline.processor.process_response(alice, {"response_type": "ACTION", "action": {"type": "WORK_ON"}})
    assert alice.is_busy
    assert pipeline.processor.process_response(alice, {"response_type": "ACTION", "action": {"type": "DRINK_COFFEE"}})
    assert len(alice.action_queue) == 1
    assert not pipeline.processor.process_response(alice, {"response_type": "NOPE"})

    clock.now += 15_000
    pipeline.processor.tick()
    assert alice.current_action is not None and alice.current_action.type == "DRINK_COFFEE"

    context = gather_context(bob, pipeline.world, now=clock.now)
    assert pipeline.processor.process_response(bob, {"response_type": "DIALOGUE", "content": "", "target": "alice"}, context)
    assert bob.last_utterance

    event_types = [event.event_type for event in pipeline.events.drain()]
    assert "ACTION_QUEUED" in event_types and "ACTION_COMPLETED" in event_types
    print("smoke_test_passed")


if __name__ == "__main__":
    run()
