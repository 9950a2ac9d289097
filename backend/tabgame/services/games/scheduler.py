import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

WAITING = 'waiting'
TURN = 'turn'


class TimerHandle:
    """A single pending timeout for one game."""

    def __init__(self, kind: str, game_id: str, delay: float, callback: Callable[[str], None], now: Optional[float] = None):
        self.kind = kind
        self.game_id = game_id
        self.delay = delay
        self.callback = callback
        self.deadline = (time.time() if now is None else now) + delay
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self):
        return f'<TimerHandle {self.kind} game={self.game_id} deadline={self.deadline:.0f}>'


@dataclass
class GameTimers:
    waiting: Optional[TimerHandle] = None
    turn: Optional[TimerHandle] = None


class TimeoutManager:
    """Per-game waiting-room and turn timers.

    - Arming a timer cancels the previous one of the same kind for that game
    - ``spawn`` starts ``_run`` in the background; when it is None the handle is
      only registered and must be fired with ``fire``
    - ``lock`` is shared with the game engine so a firing timer never interleaves
      with a handler
    - a background task sleeps in slices of at most ``poll_interval`` seconds and
      exits as soon as its handle is cancelled
    """

    def __init__(self, spawn=None, sleep=time.sleep, logger=None, clock=time.time, poll_interval: float = 1.0):
        self.lock = threading.RLock()
        self._spawn = spawn
        self._sleep = sleep
        self._clock = clock
        self._poll_interval = poll_interval
        self._timers: Dict[str, GameTimers] = {}
        self._logger = logger or logging.getLogger(__name__)

    def timers_for(self, game_id: str) -> GameTimers:
        with self.lock:
            timers = self._timers.get(game_id)
            return GameTimers(timers.waiting, timers.turn) if timers else GameTimers()

    def arm_waiting(self, game_id: str, delay: float, callback) -> TimerHandle:
        return self._arm(WAITING, game_id, delay, callback)

    def arm_turn(self, game_id: str, delay: float, callback) -> TimerHandle:
        return self._arm(TURN, game_id, delay, callback)

    def disarm_waiting(self, game_id: str) -> None:
        self._disarm(game_id, WAITING)

    def disarm_turn(self, game_id: str) -> None:
        self._disarm(game_id, TURN)

    def disarm_all(self, game_id: str) -> None:
        with self.lock:
            self._disarm(game_id, WAITING)
            self._disarm(game_id, TURN)

    def cancel_all(self) -> None:
        with self.lock:
            for game_id in list(self._timers):
                self.disarm_all(game_id)

    def fire(self, handle: TimerHandle) -> bool:
        """Run the handle's callback if it is still the armed timer of its kind."""
        with self.lock:
            timers = self._timers.get(handle.game_id)
            if not handle.active or timers is None or getattr(timers, handle.kind) is not handle:
                self._logger.info(f"[timer-abort] game={handle.game_id} kind={handle.kind} stale")
                return False
            handle.fired = True
            self._clear(timers, handle.game_id, handle.kind)
            self._logger.info(f"[timer-fire] game={handle.game_id} kind={handle.kind}")
            handle.callback(handle.game_id)
            return True

    def _arm(self, kind: str, game_id: str, delay: float, callback) -> TimerHandle:
        with self.lock:
            timers = self._timers.setdefault(game_id, GameTimers())
            previous = getattr(timers, kind)
            if previous is not None:
                previous.cancel()
            handle = TimerHandle(kind, game_id, delay, callback, now=self._clock())
            setattr(timers, kind, handle)
        self._logger.info(f"[timer-set] game={game_id} kind={kind} duration={delay}s deadline={handle.deadline:.0f}")
        if self._spawn is not None:
            self._spawn(self._run, handle)
        return handle

    def _disarm(self, game_id: str, kind: str) -> None:
        with self.lock:
            timers = self._timers.get(game_id)
            handle = getattr(timers, kind) if timers else None
            if handle is None:
                return
            handle.cancel()
            self._clear(timers, game_id, kind)
        self._logger.info(f"[timer-cancel] game={game_id} kind={kind}")

    def _clear(self, timers: GameTimers, game_id: str, kind: str) -> None:
        setattr(timers, kind, None)
        if timers.waiting is None and timers.turn is None:
            self._timers.pop(game_id, None)

    def _run(self, handle: TimerHandle) -> None:
        while handle.active:
            remaining = handle.deadline - self._clock()
            if remaining <= 0:
                self.fire(handle)
                return
            self._sleep(min(remaining, self._poll_interval))
