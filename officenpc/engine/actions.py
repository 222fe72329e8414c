from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from officenpc.engine.world import CharacterRegistry, MovementExecutor, PerceptionProvider
from officenpc.models.character import Character
from officenpc.models.intents import ActionIntent

log = logging.getLogger(__name__)

ACTION_DURATIONS_MS: dict[str, int] = {
    "MOVE_TO": 8_000,
    "WORK_ON": 15_000,
    "START_CONVERSATION": 10_000,
    "DRINK_COFFEE": 8_000,
    "EAT_SNACK": 8_000,
    "SOCIALIZE": 12_000,
    "IDLE": 5_000,
    "PUT_DOWN": 2_000,
    "THROW": 2_000,
}

WORK_PROGRESS_PER_ACTION = 10.0
UNSUITABLE_LOCATIONS: dict[str, tuple[str, ...]] = {
    "DRINK_COFFEE": ("bathroom",),
    "EAT_SNACK": ("bathroom",),
    "WORK_ON": ("bathroom",),
}


class ActionError(RuntimeError):
    pass


class ActionValidationError(ActionError):
    pass


class ActionExecutionError(ActionError):
    pass


@dataclass
class ActionEnvironment:
    perception: PerceptionProvider | None = None
    registry: CharacterRegistry | None = None
    movement: MovementExecutor | None = None
    now: int = 0


def default_duration(action_type: str) -> int:
    return ACTION_DURATIONS_MS.get(action_type, ACTION_DURATIONS_MS["IDLE"])


def with_default_duration(action: ActionIntent, override: int | None = None) -> ActionIntent:
    if action.duration is not None:
        return action
    duration = override if override is not None else default_duration(action.type)
    return action.model_copy(update={"duration": duration})


def _require_target(action: ActionIntent) -> str:
    target = (action.target or "").strip()
    if not target:
        raise ActionValidationError(f"{action.type.lower()}_missing_target")
    return target


def _require_location_suitable(character: Character, action: ActionIntent) -> None:
    location = (character.location or "").lower()
    for unsuitable in UNSUITABLE_LOCATIONS.get(action.type, ()):
        if unsuitable in location:
            raise ActionValidationError(f"{action.type.lower()}_unsuitable_location location={character.location}")


def _require_nearby(character: Character, target_id: str, env: ActionEnvironment) -> Character | None:
    if target_id == character.id:
        raise ActionValidationError("target_is_self")
    if env.registry is None:
        return None
    other = env.registry.get_character(target_id)
    if other is None:
        raise ActionValidationError(f"unknown_target target={target_id}")
    if other.location != character.location:
        raise ActionValidationError(f"target_not_nearby target={target_id}")
    return other


def _validate_move(character: Character, action: ActionIntent, env: ActionEnvironment) -> None:
    target = _require_target(action)
    if env.perception is not None and not env.perception.is_valid_location(target):
        raise ActionValidationError(f"invalid_location target={target}")


def _validate_work(character: Character, action: ActionIntent, env: ActionEnvironment) -> None:
    task = character.assigned_task
    if task is None:
        raise ActionValidationError("no_assigned_task")
    if action.target and action.target not in (task.id, task.name):
        raise ActionValidationError(f"task_mismatch target={action.target}")
    if task.required_location and task.required_location.lower() not in (character.location or "").lower():
        raise ActionValidationError(f"wrong_location required={task.required_location}")
    _require_location_suitable(character, action)


def _validate_conversation(character: Character, action: ActionIntent, env: ActionEnvironment) -> None:
    _require_nearby(character, _require_target(action), env)


def _validate_socialize(character: Character, action: ActionIntent, env: ActionEnvironment) -> None:
    if action.target:
        _require_nearby(character, action.target, env)
        return
    if env.registry is not None and character.location:
        others = [c for c in env.registry.get_characters_in_location(character.location) if c.id != character.id]
        if not others:
            raise ActionValidationError("nobody_to_socialize_with")


def _validate_consumable(character: Character, action: ActionIntent, env: ActionEnvironment) -> None:
    _require_location_suitable(character, action)


def _validate_holding(character: Character, action: ActionIntent, env: ActionEnvironment) -> None:
    if character.held_item is None:
        raise ActionValidationError("not_holding_item")


def _validate_nothing(character: Character, action: ActionIntent, env: ActionEnvironment) -> None:
    return None


Validator = Callable[[Character, ActionIntent, ActionEnvironment], None]
Processor = Callable[[Character, ActionIntent, ActionEnvironment], dict[str, Any]]

VALIDATORS: dict[str, Validator] = {
    "IDLE": _validate_nothing,
    "MOVE_TO": _validate_move,
    "WORK_ON": _validate_work,
    "START_CONVERSATION": _validate_conversation,
    "DRINK_COFFEE": _validate_consumable,
    "EAT_SNACK": _validate_consumable,
    "SOCIALIZE": _validate_socialize,
    "PUT_DOWN": _validate_holding,
    "THROW": _validate_holding,
}


def validate_action(character: Character, action: ActionIntent, env: ActionEnvironment) -> None:
    validator = VALIDATORS.get(action.type)
    if validator is None:
        raise ActionValidationError(f"unsupported_action type={action.type}")
    validator(character, action, env)


def _process_idle(character: Character, action: ActionIntent, env: ActionEnvironment) -> dict[str, Any]:
    return {}


def _process_move(character: Character, action: ActionIntent, env: ActionEnvironment) -> dict[str, Any]:
    target = _require_target(action)
    origin = character.location
    if env.movement is not None:
        if not env.movement.move_character_to(character, target):
            raise ActionExecutionError(f"movement_failed target={target}")
    else:
        character.location = target
    return {"from": origin, "to": target}


def _process_work(character: Character, action: ActionIntent, env: ActionEnvironment) -> dict[str, Any]:
    task = character.assigned_task
    if task is None:
        raise ActionExecutionError("task_vanished")
    task.progress = min(100.0, task.progress + WORK_PROGRESS_PER_ACTION)
    return {"task_id": task.id, "progress": task.progress, "completed": task.progress >= 100.0}


def _process_conversation(character: Character, action: ActionIntent, env: ActionEnvironment) -> dict[str, Any]:
    target = _require_target(action)
    character.conversation_partner_id = target
    if env.registry is not None:
        other = env.registry.get_character(target)
        if other is None:
            raise ActionExecutionError(f"target_left target={target}")
        other.conversation_partner_id = character.id
    return {"partner_id": target}


def _process_socialize(character: Character, action: ActionIntent, env: ActionEnvironment) -> dict[str, Any]:
    if action.target:
        character.conversation_partner_id = action.target
    return {"partner_id": action.target}


def _process_consumable(character: Character, action: ActionIntent, env: ActionEnvironment) -> dict[str, Any]:
    return {"location": character.location}


def _process_release(character: Character, action: ActionIntent, env: ActionEnvironment) -> dict[str, Any]:
    item = character.held_item
    if item is None:
        raise ActionExecutionError("item_vanished")
    character.held_item = None
    return {"item_id": item.id, "item_name": item.name, "target": action.target}


PROCESSORS: dict[str, Processor] = {
    "IDLE": _process_idle,
    "MOVE_TO": _process_move,
    "WORK_ON": _process_work,
    "START_CONVERSATION": _process_conversation,
    "DRINK_COFFEE": _process_consumable,
    "EAT_SNACK": _process_consumable,
    "SOCIALIZE": _process_socialize,
    "PUT_DOWN": _process_release,
    "THROW": _process_release,
}


def execute_action(character: Character, action: ActionIntent, env: ActionEnvironment) -> dict[str, Any]:
    """Run the type-specific processor; any failure surfaces as ``ActionExecutionError``."""
    processor = PROCESSORS.get(action.type)
    if processor is None:
        raise ActionExecutionError(f"unsupported_action type={action.type}")
    try:
        details = processor(character, action, env)
    except ActionExecutionError:
        raise
    except Exception as exc:
        raise ActionExecutionError(f"{action.type.lower()}_failed: {exc}") from exc
    character.action_state = action.type.lower()
    log.debug("action_executed character=%s type=%s target=%s", character.id, action.type, action.target)
    return details
