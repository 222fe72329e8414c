from __future__ import annotations

import logging
from collections.abc import Mapping

from officenpc.models.character import NEED_NAMES, Needs

log = logging.getLogger(__name__)

NeedEffectTable = Mapping[str, Mapping[str, float]]

DEFAULT_NEED_EFFECTS: dict[str, dict[str, float]] = {
    "DRINK_COFFEE": {"energy": 3.0, "comfort": 1.0, "stress": -0.5},
    "EAT_SNACK": {"hunger": 3.0, "comfort": 1.0, "energy": 0.5},
    "SOCIALIZE": {"social": 3.0, "stress": -1.0, "energy": -0.5},
    "WORK_ON": {"energy": -1.0, "stress": 0.5, "comfort": -0.2},
    "START_CONVERSATION": {"social": 2.0, "stress": -0.5},
    "IDLE": {"stress": -2.0, "energy": 1.0},
    "THROW": {"stress": -0.5},
    "MOVE_TO": {},
    "PUT_DOWN": {},
}

DIALOGUE_NEED_EFFECT: dict[str, float] = {"social": 0.5}

LOW_NEED_THRESHOLD = 4.0

# need -> restorative intent, in the order the context builder offers them
RESTORATIVE_INTENTS: tuple[tuple[str, str], ...] = (
    ("energy", "DRINK_COFFEE"),
    ("hunger", "EAT_SNACK"),
    ("social", "SOCIALIZE"),
)


def apply_need_deltas(needs: Needs, deltas: Mapping[str, float]) -> dict[str, float]:
    """Apply deltas in place and return the change actually applied after clamping."""
    applied: dict[str, float] = {}
    for name, delta in deltas.items():
        if name not in NEED_NAMES:
            log.debug("need_delta_ignored need=%s", name)
            continue
        before = getattr(needs, name)
        setattr(needs, name, before + float(delta))
        applied[name] = round(getattr(needs, name) - before, 4)
    return applied


def restorative_intents(needs: Needs, threshold: float = LOW_NEED_THRESHOLD) -> list[str]:
    return [intent for name, intent in RESTORATIVE_INTENTS if getattr(needs, name) < threshold]


def effects_for(table: NeedEffectTable, action_type: str) -> dict[str, float]:
    return dict(table.get(action_type, {}))
