import time
from typing import Callable, Optional


class Countdown:
    """A one-second countdown that can be cancelled.

    ``start`` hands the loop to ``spawn`` (a Socket.IO background task in the
    app). Without ``spawn`` nothing runs on its own and the owner drives it by
    calling ``on_tick`` itself; tests rely on that.
    """

    interval = 1

    def __init__(self, phase: str, seconds: int, on_tick: Callable[['Countdown'], None],
                 spawn: Optional[Callable] = None, sleep: Callable[[float], None] = time.sleep):
        self.phase = phase
        self.remaining = seconds
        self._on_tick = on_tick
        self._spawn = spawn
        self._sleep = sleep
        self.cancelled = False

    @property
    def active(self) -> bool:
        return not self.cancelled

    def start(self) -> None:
        if self._spawn is not None:
            self._spawn(self._run)

    def step(self) -> int:
        self.remaining -= 1
        return self.remaining

    def cancel(self) -> None:
        self.cancelled = True

    def _run(self) -> None:
        while self.active:
            self._sleep(self.interval)
            if not self.active:
                return
            self._on_tick(self)

    def __repr__(self):
        state = 'cancelled' if self.cancelled else 'active'
        return f"<Countdown {self.phase} {self.remaining}s {state}>"
