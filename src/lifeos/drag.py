"""Pointer tracking for drag interactions on the dial and the timeline.

A drag subscribes to global pointer-move / pointer-up events only while it
is in progress and unsubscribes exactly once, so repeated drags never pile
up handlers on the bus.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Callable

from lifeos.config import DEFAULT_CONFIG, LifeConfig
from lifeos.store import DragDial, ScheduleTask
from lifeos.timeline import pixel_to_hour

if TYPE_CHECKING:
    from lifeos.session import Session

logger = logging.getLogger(__name__)

MOVE = "move"
UP = "up"

Handler = Callable[[float, float], None]


class PointerBus:
    """Minimal global pointer event dispatcher."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        """Register *handler*; returns a callable that removes it once."""
        self._handlers[event].append(handler)
        removed = False

        def unsubscribe() -> None:
            nonlocal removed
            if removed:
                return
            removed = True
            self._handlers[event].remove(handler)

        return unsubscribe

    def emit(self, event: str, x: float, y: float) -> None:
        for handler in list(self._handlers[event]):
            handler(x, y)

    def handler_count(self, event: str) -> int:
        return len(self._handlers[event])


class DragSession:
    """One press-move-release interaction."""

    def __init__(self, bus: PointerBus, on_move: Handler, on_drop: Handler | None = None):
        self.bus = bus
        self.on_move = on_move
        self.on_drop = on_drop
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def active(self) -> bool:
        return bool(self._unsubscribers)

    def begin(self) -> None:
        if self.active:
            return
        self._unsubscribers = [
            self.bus.subscribe(MOVE, self.on_move),
            self.bus.subscribe(UP, self._release),
        ]

    def end(self) -> None:
        unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsubscribe in unsubscribers:
            unsubscribe()

    def _release(self, x: float, y: float) -> None:
        self.end()
        if self.on_drop is not None:
            self.on_drop(x, y)


class DialDrag:
    """Drags the countdown knob around a dial centered at *center*."""

    def __init__(self, session: Session, bus: PointerBus, center: tuple[float, float]):
        self.session = session
        self.center = center
        self.drag = DragSession(bus, self._move)

    def press(self) -> None:
        self.drag.begin()

    def _move(self, x: float, y: float) -> None:
        cx, cy = self.center
        self.session.dispatch(DragDial(x - cx, y - cy))


class TimelineDrag:
    """Drags a task over the planning timeline and pins it where it drops.

    *top* is the timeline's vertical page offset minus its scroll position,
    so ``y - top`` is the offset inside the timeline.
    """

    def __init__(
        self,
        session: Session,
        bus: PointerBus,
        task_id: str,
        date: str,
        top: float = 0.0,
        config: LifeConfig = DEFAULT_CONFIG,
    ):
        self.session = session
        self.task_id = task_id
        self.date = date
        self.top = top
        self.config = config
        self.hover_hour: int | None = None
        self.drag = DragSession(bus, self._move, self._drop)

    def press(self) -> None:
        self.drag.begin()

    def cancel(self) -> None:
        self.hover_hour = None
        self.drag.end()

    def _move(self, x: float, y: float) -> None:
        self.hover_hour = pixel_to_hour(y - self.top, self.config)

    def _drop(self, x: float, y: float) -> None:
        hour = pixel_to_hour(y - self.top, self.config)
        self.hover_hour = None
        logger.debug("Dropped %s at %02d:00", self.task_id, hour)
        self.session.dispatch(ScheduleTask(self.task_id, self.date, hour))
