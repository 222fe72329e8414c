from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from officenpc.models.events import EventRecord

log = logging.getLogger(__name__)

EventObserver = Callable[[EventRecord], None]


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class EventQueue:
    """Outbound event sink.

    Each ``fire_event`` call is delivered at most once: observers are notified
    synchronously and the record is queued until a single ``drain`` hands it out.
    """

    def __init__(self, clock: Callable[[], int] | None = None, max_pending: int = 1000) -> None:
        self.clock = clock or wall_clock_ms
        self.max_pending = max_pending
        self._pending: list[EventRecord] = []
        self._observers: list[EventObserver] = []
        self._sequence = 0

    def subscribe(self, observer: EventObserver) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: EventObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def fire_event(self, name: str, payload: dict[str, Any]) -> None:
        self._sequence += 1
        record = EventRecord(
            sequence=self._sequence,
            event_type=name,
            actor_id=payload.get("character_id"),
            payload=dict(payload),
            ts=self.clock(),
        )
        self._pending.append(record)
        if len(self._pending) > self.max_pending:
            dropped = self._pending.pop(0)
            log.warning("event_dropped type=%s sequence=%s", dropped.event_type, dropped.sequence)
        log.debug("event_fired type=%s actor=%s", name, record.actor_id)
        for observer in list(self._observers):
            try:
                observer(record)
            except Exception:
                log.warning("event_observer_failed type=%s", name, exc_info=True)

    def drain(self) -> list[EventRecord]:
        drained, self._pending = self._pending, []
        return drained

    def pending(self) -> int:
        return len(self._pending)
