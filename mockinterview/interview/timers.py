"""
Elapsed-time counters for the answer in progress and the whole session.

Counters only advance when something calls ``tick()``; the real-time source is
:class:`TickDriver`, and tests tick by hand.
"""
import logging
import threading
from typing import Callable, Optional

from ..config import TICK_SECONDS

logger = logging.getLogger("timers")


class ElapsedCounter:
    """Counts ticks while running; keeps its value while paused."""

    def __init__(self):
        self.value = 0
        self.running = False

    def start(self) -> None:
        self.running = True

    def pause(self) -> None:
        self.running = False

    def reset(self) -> None:
        self.value = 0

    def tick(self) -> None:
        if self.running:
            self.value += 1


class TimerService:
    """
    Per-answer and per-session elapsed time.

    ``answer_elapsed`` restarts from 0 on every capture attempt and only runs
    while listening. ``session_elapsed`` starts when the session opens and is
    never reset.
    """

    def __init__(self):
        self._answer = ElapsedCounter()
        self._session = ElapsedCounter()

    @property
    def answer_elapsed(self) -> int:
        return self._answer.value

    @property
    def session_elapsed(self) -> int:
        return self._session.value

    def open_session(self) -> None:
        self._session.start()

    def close_session(self) -> None:
        self._session.pause()
        self._answer.pause()

    def restart_answer(self) -> None:
        self._answer.reset()
        self._answer.start()

    def pause_answer(self) -> None:
        self._answer.pause()

    def clear_answer(self) -> None:
        self._answer.pause()
        self._answer.reset()

    def tick(self) -> None:
        self._answer.tick()
        self._session.tick()


class TickDriver:
    """Calls ``on_tick`` every ``interval`` seconds on a daemon thread."""

    def __init__(self, on_tick: Callable[[], None], interval: float = TICK_SECONDS):
        self.on_tick = on_tick
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="tick-driver", daemon=True)
        self._thread.start()
        logger.debug("Tick driver started (%.2fs)", self.interval)

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.interval * 2)
        self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.on_tick()
