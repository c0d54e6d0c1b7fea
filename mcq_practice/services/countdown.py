# mcq_practice/services/countdown.py
import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class Countdown:
    """
    Seconds-remaining countdown for timed quizzes.

    The countdown does not own a clock: something calls ``tick()`` once per
    second (``run()`` does exactly that). When the remaining time reaches
    zero ``on_expire`` fires once and the countdown stops for good.
    ``cancel()`` stops it without firing, e.g. after a manual submit.
    """

    def __init__(self, total_seconds: int, on_expire: Callable[[], None]):
        if total_seconds <= 0:
            raise ValueError("countdown needs a positive number of seconds")
        self.total_seconds = total_seconds
        self.remaining = total_seconds
        self._on_expire = on_expire
        self._running = False
        self._finished = False
        self._fired = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def expired(self) -> bool:
        return self._fired

    @property
    def fraction_left(self) -> float:
        return max(0.0, self.remaining / self.total_seconds)

    def start(self) -> None:
        if not self._finished:
            self._running = True

    def pause(self) -> None:
        self._running = False

    def resume(self) -> None:
        self.start()

    def cancel(self) -> None:
        self._running = False
        self._finished = True

    def tick(self, seconds: int = 1) -> int:
        if not self._running or self._finished:
            return self.remaining

        self.remaining = max(0, self.remaining - seconds)
        if self.remaining == 0:
            self._expire()
        return self.remaining

    def _expire(self) -> None:
        self._running = False
        self._finished = True
        if self._fired:
            return
        self._fired = True
        logger.debug("countdown of %ss expired", self.total_seconds)
        self._on_expire()

    def run(self, sleep: Callable[[float], None] = time.sleep) -> None:
        """Block, ticking once per second until expired, paused or cancelled."""
        self.start()
        while self._running and not self._finished:
            sleep(1)
            self.tick()


def format_seconds(seconds: int) -> str:
    """MM:SS, as shown next to the question counter."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"
