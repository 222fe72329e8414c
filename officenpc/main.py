from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from officenpc.config import Settings, configure_logging
from officenpc.engine.events import EventQueue
from officenpc.engine.processor import ResponseProcessor
from officenpc.engine.world import OfficeWorld
from officenpc.llm.client import LLMClient
from officenpc.llm.npc_dialogue import LLMLineSource
from officenpc.models.character import Character, Task
from officenpc.npc.context import gather_context
from officenpc.npc.dialogue import ConversationalDialogueSystem
from officenpc.npc.router import DialogueRouter, LineSource

log = logging.getLogger(__name__)


@dataclass
class Pipeline:
    settings: Settings
    world: OfficeWorld
    events: EventQueue
    dialogue: ConversationalDialogueSystem
    processor: ResponseProcessor


def build_pipeline(settings: Settings, world: OfficeWorld | None = None) -> Pipeline:
    rng = random.Random(settings.rng_seed)
    world = world or OfficeWorld()
    events = EventQueue()
    line_source: LineSource | None = None
    if settings.dialogue_backend == "llm":
        line_source = LLMLineSource(LLMClient(settings))
    dialogue = ConversationalDialogueSystem(
        router=DialogueRouter(rng=rng, line_source=line_source),
        settings=settings,
        rng=rng,
        events=events,
    )
    processor = ResponseProcessor(world=world, events=events, dialogue=dialogue, settings=settings, rng=rng)
    return Pipeline(settings=settings, world=world, events=events, dialogue=dialogue, processor=processor)


def _seed_office(world: OfficeWorld) -> tuple[Character, Character]:
    alice = world.add_character(
        Character(
            id="alice",
            name="Alice",
            job_role="Engineer",
            personality_tags=["Professional", "Organized"],
            location="Office Area",
            assigned_task=Task(id="report", name="Quarterly report", required_location="Office Area"),
        )
    )
    bob = world.add_character(
        Character(id="bob", name="Bob", job_role="Designer", personality_tags=["Extroverted", "Chaotic"], location="Office Area")
    )
    return alice, bob


def main() -> None:
    settings = Settings()
    configure_logging(settings.dev_mode)
    log.info("demo_start %s", settings.redacted())
    pipeline = build_pipeline(settings)
    alice, bob = _seed_office(pipeline.world)

    for line in ("Morning! Did you catch the game last night?", "Any idea when the deadline for the report is?"):
        reply = pipeline.dialogue.generate_response(alice, line, bob, None)
        print(f"{bob.name}: {line}\n{alice.name}: {reply}")

    decision = {
        "response_type": "MIXED",
        "action": {"type": "WORK_ON", "target": "report"},
        "content": "How is the report going?",
        "target": "bob",
        "thought": "I should finish the report before lunch.",
    }
    ok = pipeline.processor.process_response(alice, decision, gather_context(alice, pipeline.world))
    print(f"processed={ok} busy={alice.is_busy} progress={alice.assigned_task.progress if alice.assigned_task else None}")

    for event in pipeline.events.drain():
        print(f"event {event.sequence} {event.event_type} {event.payload}")
    log.info("demo_stats processor=%s", pipeline.processor.get_stats())


if __name__ == "__main__":
    main()
