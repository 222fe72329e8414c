from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from officenpc.config import Settings
from officenpc.engine.actions import (
    ActionEnvironment,
    ActionExecutionError,
    ActionValidationError,
    execute_action,
    validate_action,
    with_default_duration,
)
from officenpc.engine.events import wall_clock_ms
from officenpc.engine.scheduler import WorkScheduler
from officenpc.engine.world import CharacterRegistry, EventSink, MovementExecutor, PerceptionProvider
from officenpc.models.character import ActionHistoryEntry, Character
from officenpc.models.intents import ActionIntent, AIResponse
from officenpc.models.snapshot import ContextSnapshot
from officenpc.npc.context import dialogue_context, gather_context
from officenpc.npc.dialogue import ConversationalDialogueSystem
from officenpc.npc.memory import add_memory
from officenpc.npc.needs import DEFAULT_NEED_EFFECTS, DIALOGUE_NEED_EFFECT, NeedEffectTable, apply_need_deltas, effects_for
from officenpc.npc.personality import follow_up_remark

log = logging.getLogger(__name__)

COMPLETION_WORK = "action_complete"
FOLLOW_UP_WORK = "follow_up"
DRAIN_WORK = "drain_queue"


@dataclass
class ProcessorStats:
    total: int = 0
    successful: int = 0
    failed: int = 0
    malformed: int = 0
    queued: int = 0
    rejected: int = 0
    timed_out: int = 0
    total_time_ms: int = 0
    by_response_type: Counter[str] = field(default_factory=Counter)
    by_action_type: Counter[str] = field(default_factory=Counter)


class ResponseProcessor:
    """Turns a decision object into committed world state.

    Nothing raised inside a stage escapes ``process_response``: every failure ends
    with the character idle and not busy, and is reported as ``False``.
    """

    def __init__(
        self,
        *,
        world: PerceptionProvider | None = None,
        registry: CharacterRegistry | None = None,
        movement: MovementExecutor | None = None,
        events: EventSink | None = None,
        scheduler: WorkScheduler | None = None,
        dialogue: ConversationalDialogueSystem | None = None,
        settings: Settings | None = None,
        need_effects: NeedEffectTable | None = None,
        clock: Callable[[], int] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.clock = clock or wall_clock_ms
        self.rng = rng or random.Random(self.settings.rng_seed)
        self.world = world
        self.registry = registry if registry is not None else _as_registry(world)
        self.movement = movement if movement is not None else _as_movement(world)
        self.events = events
        self.scheduler = scheduler or WorkScheduler(self.clock, registry=self)
        self.dialogue = dialogue or ConversationalDialogueSystem(
            settings=self.settings, rng=self.rng, clock=self.clock, events=events
        )
        self.need_effects: NeedEffectTable = need_effects if need_effects is not None else DEFAULT_NEED_EFFECTS
        self.stats = ProcessorStats()
        self._characters: dict[str, Character] = {}
        self._completions: dict[str, int] = {}
        self._in_world: set[str] = set()

    # CharacterRegistry, so deferred work can see removals. A character that was in the
    # world when processed is gone once the world drops it; one that never joined the
    # world is tracked locally until remove_character.
    def get_character(self, character_id: str) -> Character | None:
        if self.registry is not None:
            found = self.registry.get_character(character_id)
            if found is not None or character_id in self._in_world:
                return found
        return self._characters.get(character_id)

    def get_characters_in_location(self, location_id: str) -> list[Character]:
        found = list(self.registry.get_characters_in_location(location_id)) if self.registry is not None else []
        seen = {c.id for c in found} | self._in_world
        found.extend(c for c in self._characters.values() if c.location == location_id and c.id not in seen)
        return found

    def process_response(
        self,
        character: Character,
        response: AIResponse | Mapping[str, Any] | None,
        context: ContextSnapshot | Mapping[str, Any] | None = None,
    ) -> bool:
        started = self.clock()
        self.stats.total += 1
        self._characters[character.id] = character
        if self.registry is not None and self.registry.get_character(character.id) is not None:
            self._in_world.add(character.id)
        try:
            decision = parse_response(response)
        except (ValidationError, TypeError, ValueError) as exc:
            self.stats.failed += 1
            self.stats.malformed += 1
            log.warning("response_malformed character=%s error=%s", character.id, str(exc).splitlines()[0])
            return False

        self.stats.by_response_type[decision.response_type] += 1
        try:
            ok = self._dispatch(character, decision, context)
        except Exception:
            log.warning("response_processing_failed character=%s fallback=idle", character.id, exc_info=True)
            self._go_idle(character, reason="processing_failed")
            ok = False

        if ok and decision.thought and decision.thought.strip():
            self._remember(character, decision.thought.strip(), kind="thought")
        if ok:
            self.stats.successful += 1
        else:
            self.stats.failed += 1
        self.stats.total_time_ms += max(0, self.clock() - started)
        log.debug("response_processed character=%s type=%s ok=%s", character.id, decision.response_type, ok)
        return ok

    def _dispatch(
        self,
        character: Character,
        decision: AIResponse,
        context: ContextSnapshot | Mapping[str, Any] | None,
    ) -> bool:
        if decision.response_type == "IDLE":
            self._go_idle(character, reason="decision")
            return True
        if decision.response_type == "ACTION" and decision.action is not None:
            return self._handle_action(character, decision.action, decision, context, recover_with_dialogue=True)
        if decision.response_type == "DIALOGUE":
            return self._handle_dialogue(character, decision, context)
        action_ok = True
        if decision.action is not None:
            action_ok = self._handle_action(character, decision.action, decision, context, recover_with_dialogue=False)
        dialogue_ok = True
        if decision.content is not None:
            dialogue_ok = self._handle_dialogue(character, decision, context)
        return action_ok and dialogue_ok

    def _handle_action(
        self,
        character: Character,
        requested: ActionIntent,
        decision: AIResponse,
        context: ContextSnapshot | Mapping[str, Any] | None,
        *,
        recover_with_dialogue: bool,
    ) -> bool:
        action = with_default_duration(requested, decision.duration)
        self.stats.by_action_type[action.type] += 1
        try:
            validate_action(character, action, self._env())
        except ActionValidationError as exc:
            log.info("action_invalid character=%s type=%s reason=%s fallback=idle", character.id, action.type, exc)
            self._fire("ACTION_FAILED", character, {"action": action.type, "stage": "validation", "reason": str(exc)})
            self._go_idle(character, reason="validation_failed")
            return False

        if action.priority == "critical":
            if character.is_busy:
                self._preempt(character)
        elif character.is_busy or len(character.action_queue) >= self.settings.max_queue_size:
            return self._enqueue(character, action)
        return self._execute(character, action, decision, context, recover_with_dialogue=recover_with_dialogue)

    def _enqueue(self, character: Character, action: ActionIntent) -> bool:
        if len(character.action_queue) >= self.settings.max_queue_size:
            self.stats.rejected += 1
            log.info("action_rejected character=%s type=%s queue=%s", character.id, action.type, len(character.action_queue))
            self._fire("ACTION_REJECTED", character, {"action": action.type, "queue_size": len(character.action_queue)})
            return False
        character.action_queue.append(action)
        self.stats.queued += 1
        log.debug("action_queued character=%s type=%s queue=%s", character.id, action.type, len(character.action_queue))
        self._fire("ACTION_QUEUED", character, {"action": action.type, "queue_size": len(character.action_queue)})
        return True

    def _execute(
        self,
        character: Character,
        action: ActionIntent,
        decision: AIResponse | None,
        context: ContextSnapshot | Mapping[str, Any] | None,
        *,
        recover_with_dialogue: bool,
    ) -> bool:
        now = self.clock()
        try:
            details = execute_action(character, action, self._env(now))
        except ActionExecutionError as exc:
            log.warning("action_execution_failed character=%s type=%s error=%s", character.id, action.type, exc)
            self._clear_busy(character)
            self._fire("ACTION_FAILED", character, {"action": action.type, "stage": "execution", "reason": str(exc)})
            if recover_with_dialogue and decision is not None and decision.content is not None:
                self._handle_dialogue(character, decision, context)
            else:
                self._go_idle(character, reason="execution_failed")
            return False

        applied = apply_need_deltas(character.needs, effects_for(self.need_effects, action.type))
        duration = action.duration or 0
        character.action_history.append(
            ActionHistoryEntry(type=action.type, target=action.target, started_at=now, duration=duration, need_deltas=applied)
        )
        del character.action_history[: max(0, len(character.action_history) - self.settings.action_history_cap)]
        character.is_busy = True
        character.current_action = action
        character.action_started_at = now
        item = self.scheduler.schedule(
            character.id,
            duration,
            lambda character_id=character.id: self._complete_action(character_id),
            kind=COMPLETION_WORK,
        )
        self._completions[character.id] = item.id
        self._fire(
            "CHARACTER_ACTION",
            character,
            {"action": action.type, "target": action.target, "duration": duration, "need_deltas": applied, **details},
        )
        return True

    def _complete_action(self, character_id: str) -> None:
        character = self.get_character(character_id)
        self._completions.pop(character_id, None)
        if character is None or character.current_action is None:
            return
        finished = character.current_action
        self._clear_busy(character)
        log.debug("action_completed character=%s type=%s", character_id, finished.type)
        self._fire("ACTION_COMPLETED", character, {"action": finished.type, "target": finished.target})
        self._drain_queue(character)

    def _drain_queue(self, character: Character) -> None:
        while character.action_queue and not character.is_busy:
            action = character.action_queue.pop(0)
            try:
                validate_action(character, action, self._env())
            except ActionValidationError as exc:
                log.info("queued_action_invalid character=%s type=%s reason=%s", character.id, action.type, exc)
                self._fire("ACTION_FAILED", character, {"action": action.type, "stage": "validation", "reason": str(exc)})
                continue
            self._execute(character, action, None, None, recover_with_dialogue=False)

    def _preempt(self, character: Character) -> None:
        item_id = self._completions.pop(character.id, None)
        if item_id is not None:
            self.scheduler.cancel(item_id)
        interrupted = character.current_action
        self._clear_busy(character)
        log.info("action_preempted character=%s type=%s", character.id, interrupted.type if interrupted else None)

    def _handle_dialogue(
        self,
        character: Character,
        decision: AIResponse,
        context: ContextSnapshot | Mapping[str, Any] | None,
    ) -> bool:
        speaker = self.get_character(decision.target) if decision.target else None
        try:
            line = self.dialogue.generate_response(character, decision.content or "", speaker, self._dialogue_context(character, context))
        except Exception:
            log.warning("dialogue_generation_failed character=%s fallback=emergency", character.id, exc_info=True)
            line = self.dialogue.emergency_fallback(character)
        if not line:
            return False
        character.last_utterance = line
        if decision.target:
            character.conversation_partner_id = decision.target
        self._remember(character, line, kind="dialogue")
        apply_need_deltas(character.needs, DIALOGUE_NEED_EFFECT)
        self._fire("CHARACTER_DIALOGUE", character, {"target": decision.target, "line": line, "heard": decision.content})
        self._maybe_schedule_follow_up(character)
        return True

    def _dialogue_context(self, character: Character, context: ContextSnapshot | Mapping[str, Any] | None) -> dict[str, Any]:
        if isinstance(context, ContextSnapshot):
            return dialogue_context(context)
        if isinstance(context, Mapping):
            return dict(context)
        return dialogue_context(gather_context(character, self.world, now=self.clock()))

    def _maybe_schedule_follow_up(self, character: Character) -> None:
        remark = follow_up_remark(character, self.rng, self.settings.follow_up_probability)
        if remark is None:
            return
        self.scheduler.cancel_owner(character.id, FOLLOW_UP_WORK)
        self.scheduler.schedule(
            character.id,
            self.settings.follow_up_delay_ms,
            lambda character_id=character.id: self._deliver_follow_up(character_id, remark),
            kind=FOLLOW_UP_WORK,
            skip_if_busy=True,
        )

    def _deliver_follow_up(self, character_id: str, remark: str) -> None:
        character = self.get_character(character_id)
        if character is None or character.is_busy:
            return
        character.last_utterance = remark
        self._remember(character, remark, kind="dialogue")
        self._fire("FOLLOW_UP_DIALOGUE", character, {"line": remark, "target": character.conversation_partner_id})

    def _remember(self, character: Character, content: str, *, kind: str) -> None:
        add_memory(
            character,
            content,
            kind=kind,  # type: ignore[arg-type]
            timestamp=self.clock(),
            short_term_cap=self.settings.short_term_memory_cap,
            long_term_cap=self.settings.long_term_memory_cap,
        )

    def _go_idle(self, character: Character, *, reason: str) -> None:
        item_id = self._completions.pop(character.id, None)
        if item_id is not None:
            self.scheduler.cancel(item_id)
        self._clear_busy(character)
        self._fire("CHARACTER_IDLE", character, {"reason": reason})

    def _clear_busy(self, character: Character) -> None:
        character.is_busy = False
        character.current_action = None
        character.action_started_at = None
        character.action_state = "idle"

    def sweep_action_timeouts(self, now: int | None = None) -> list[str]:
        """Force-clear actions active longer than the timeout. Timed-out actions are not retried."""
        cutoff = (self.clock() if now is None else now) - self.settings.action_timeout_ms
        cleared: list[str] = []
        for character in list(self._characters.values()):
            if not character.is_busy or character.action_started_at is None:
                continue
            if character.action_started_at > cutoff:
                continue
            timed_out = character.current_action
            item_id = self._completions.pop(character.id, None)
            if item_id is not None:
                self.scheduler.cancel(item_id)
            self._clear_busy(character)
            self.stats.timed_out += 1
            cleared.append(character.id)
            log.warning("action_timed_out character=%s type=%s", character.id, timed_out.type if timed_out else None)
            self._fire("ACTION_TIMED_OUT", character, {"action": timed_out.type if timed_out else None})
            if character.action_queue:
                self.scheduler.schedule(
                    character.id,
                    0,
                    lambda character_id=character.id: self._drain_owner(character_id),
                    kind=DRAIN_WORK,
                    skip_if_busy=True,
                )
        return cleared

    def _drain_owner(self, character_id: str) -> None:
        character = self.get_character(character_id)
        if character is not None:
            self._drain_queue(character)

    def tick(self, now: int | None = None) -> int:
        """Run due deferred work, then sweep timeouts."""
        moment = self.clock() if now is None else now
        executed = self.scheduler.run_due(moment)
        self.sweep_action_timeouts(moment)
        return executed

    def remove_character(self, character_id: str) -> None:
        self._characters.pop(character_id, None)
        self._in_world.discard(character_id)
        self._completions.pop(character_id, None)
        cancelled = self.scheduler.cancel_owner(character_id)
        log.info("character_untracked character=%s cancelled_work=%s", character_id, cancelled)

    def get_stats(self) -> dict[str, Any]:
        stats = self.stats
        return {
            "total_processed": stats.total,
            "successful": stats.successful,
            "failed": stats.failed,
            "malformed": stats.malformed,
            "success_rate": round(stats.successful / stats.total, 3) if stats.total else 0.0,
            "queued": stats.queued,
            "rejected": stats.rejected,
            "timed_out": stats.timed_out,
            "by_response_type": dict(stats.by_response_type),
            "by_action_type": dict(stats.by_action_type),
            "average_processing_time_ms": round(stats.total_time_ms / stats.total, 2) if stats.total else 0.0,
            "pending_work": len(self.scheduler.pending()),
        }

    def reset_stats(self) -> None:
        self.stats = ProcessorStats()

    def _env(self, now: int | None = None) -> ActionEnvironment:
        return ActionEnvironment(
            perception=self.world,
            registry=self if self.registry is not None else None,
            movement=self.movement,
            now=self.clock() if now is None else now,
        )

    def _fire(self, name: str, character: Character, payload: dict[str, Any]) -> None:
        if self.events is None:
            return
        self.events.fire_event(name, {"character_id": character.id, **payload})


def parse_response(response: AIResponse | Mapping[str, Any] | None) -> AIResponse:
    """Validate decision shape; raises ``ValueError``/``TypeError`` (incl. pydantic ``ValidationError``)."""
    if isinstance(response, AIResponse):
        decision = response
    elif isinstance(response, Mapping):
        decision = AIResponse.model_validate(dict(response))
    else:
        raise TypeError(f"response must be a mapping, got {type(response).__name__}")
    if decision.response_type == "ACTION" and decision.action is None:
        raise ValueError("action_response_missing_action")
    if decision.response_type == "DIALOGUE" and decision.content is None:
        raise ValueError("dialogue_response_missing_content")
    if decision.response_type == "MIXED" and decision.action is None and decision.content is None:
        raise ValueError("mixed_response_missing_parts")
    return decision


def _as_registry(world: object) -> CharacterRegistry | None:
    if hasattr(world, "get_character") and hasattr(world, "get_characters_in_location"):
        return world  # type: ignore[return-value]
    return None


def _as_movement(world: object) -> MovementExecutor | None:
    if hasattr(world, "move_character_to"):
        return world  # type: ignore[return-value]
    return None
