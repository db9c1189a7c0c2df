import asyncio
import logging
from enum import Enum
from typing import Callable, List, NamedTuple

logger = logging.getLogger(__name__)

DEFAULT_SECONDS = 65
TICK_INTERVAL = 1.0


class RunState(Enum):
    RUNNING = "running"
    PAUSED = "paused"


class Display(NamedTuple):
    """What the screen shows: minutes, seconds and whether we are counting."""

    minutes: int
    seconds: int
    is_running: bool


Subscriber = Callable[[Display], None]


class CountdownController:
    """
    Owns the remaining duration and the play/pause state of one countdown.

    - Duration is whole seconds and never goes below zero.
    - Starts PAUSED: nothing ticks until the user toggles once.
    - Subscribers get a fresh Display after every change.
    """

    def __init__(self, seconds: int = DEFAULT_SECONDS):
        self._duration = max(0, int(seconds))
        self._run_state = RunState.PAUSED
        self._subscribers: List[Subscriber] = []

    @property
    def duration(self) -> int:
        return self._duration

    @property
    def run_state(self) -> RunState:
        return self._run_state

    @property
    def is_running(self) -> bool:
        return self._run_state is RunState.RUNNING

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that removes it again."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def increment(self, seconds: int) -> None:
        self._set_duration(self._duration + seconds)
        self._notify()

    def decrement(self, seconds: int) -> None:
        """Subtract seconds, stopping at zero."""
        self._set_duration(self._duration - seconds)
        self._notify()

    def toggle_run_state(self) -> None:
        if self._run_state is RunState.RUNNING:
            self._run_state = RunState.PAUSED
        else:
            self._run_state = RunState.RUNNING
        logger.debug("Run state toggled to %s at %ds", self._run_state.value, self._duration)
        self._notify()

    def tick(self) -> None:
        """Advance one second. Pauses instead of going below zero."""
        if self._run_state is not RunState.RUNNING:
            return

        if self._duration > 0:
            self._duration -= 1
        if self._duration == 0:
            self._run_state = RunState.PAUSED
            logger.debug("Countdown reached zero, pausing")
        self._notify()

    def render(self) -> Display:
        minutes, seconds = divmod(self._duration, 60)
        return Display(minutes, seconds, self.is_running)

    def _set_duration(self, seconds: int) -> None:
        self._duration = max(0, int(seconds))

    def _notify(self) -> None:
        display = self.render()
        # Copy so a callback may unsubscribe itself
        for callback in list(self._subscribers):
            callback(display)


async def tick_while_running(controller: CountdownController, interval: float = TICK_INTERVAL) -> None:
    """Tick once per interval until the controller is paused."""
    logger.debug("Tick loop started")
    while controller.is_running:
        controller.tick()
        if not controller.is_running:
            break
        await asyncio.sleep(interval)
    logger.debug("Tick loop exited at %ds", controller.duration)
