from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from officenpc.engine.events import wall_clock_ms
from officenpc.engine.world import CharacterRegistry

log = logging.getLogger(__name__)


@dataclass
class WorkItem:
    id: int
    owner_id: str
    kind: str
    due_at: int
    callback: Callable[[], None]
    skip_if_busy: bool = False
    cancelled: bool = False


class WorkScheduler:
    """Deferred, cancellable work items run cooperatively by ``run_due``.

    An item whose owner has left the registry, or that asked to be skipped while
    its owner is busy, is dropped silently when it comes due.
    """

    def __init__(
        self,
        clock: Callable[[], int] | None = None,
        registry: CharacterRegistry | None = None,
    ) -> None:
        self.clock = clock or wall_clock_ms
        self.registry = registry
        self._items: dict[int, WorkItem] = {}
        self._next_id = 0

    def schedule(
        self,
        owner_id: str,
        delay_ms: int,
        callback: Callable[[], None],
        *,
        kind: str,
        skip_if_busy: bool = False,
    ) -> WorkItem:
        self._next_id += 1
        item = WorkItem(
            id=self._next_id,
            owner_id=owner_id,
            kind=kind,
            due_at=self.clock() + max(0, int(delay_ms)),
            callback=callback,
            skip_if_busy=skip_if_busy,
        )
        self._items[item.id] = item
        log.debug("work_scheduled id=%s owner=%s kind=%s due_at=%s", item.id, owner_id, kind, item.due_at)
        return item

    def cancel(self, item_id: int) -> bool:
        item = self._items.pop(item_id, None)
        if item is None:
            return False
        item.cancelled = True
        return True

    def cancel_owner(self, owner_id: str, kind: str | None = None) -> int:
        doomed = [i.id for i in self._items.values() if i.owner_id == owner_id and (kind is None or i.kind == kind)]
        for item_id in doomed:
            self.cancel(item_id)
        if doomed:
            log.info("work_cancelled owner=%s kind=%s count=%s", owner_id, kind or "*", len(doomed))
        return len(doomed)

    def pending(self, owner_id: str | None = None, kind: str | None = None) -> list[WorkItem]:
        items = [
            item
            for item in self._items.values()
            if (owner_id is None or item.owner_id == owner_id) and (kind is None or item.kind == kind)
        ]
        return sorted(items, key=lambda item: (item.due_at, item.id))

    def run_due(self, now: int | None = None) -> int:
        """Run every item due at ``now``, including items scheduled by callbacks that are already due."""
        cutoff = self.clock() if now is None else now
        executed = 0
        while True:
            due = [item for item in self._items.values() if item.due_at <= cutoff]
            if not due:
                return executed
            item = min(due, key=lambda i: (i.due_at, i.id))
            del self._items[item.id]
            if self._should_skip(item):
                continue
            try:
                item.callback()
                executed += 1
            except Exception:
                log.warning("work_item_failed id=%s owner=%s kind=%s", item.id, item.owner_id, item.kind, exc_info=True)

    def _should_skip(self, item: WorkItem) -> bool:
        if self.registry is None:
            return False
        owner = self.registry.get_character(item.owner_id)
        if owner is None:
            log.debug("work_skipped id=%s owner=%s reason=owner_removed", item.id, item.owner_id)
            return True
        if item.skip_if_busy and owner.is_busy:
            log.debug("work_skipped id=%s owner=%s reason=owner_busy", item.id, item.owner_id)
            return True
        return False
