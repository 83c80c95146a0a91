"""System clock ticks and periodic alarms."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

__all__ = ["Alarm", "Clock", "SystemTime"]

DEFAULT_TICK_MS = 10


@dataclass
class SystemTime:
    milliseconds: int = 0
    seconds: int = 0
    minutes: int = 0
    hours: int = 0
    days: int = 0
    months: int = 0
    years: int = 0


@dataclass
class Alarm:
    """Calls ``callback`` every ``period`` milliseconds."""

    callback: Callable[[], object]
    period: int
    time_left: int


class Clock:
    """Counts timer ticks and fires the alarms that fall due."""

    def __init__(self, tick_ms: int = DEFAULT_TICK_MS) -> None:
        if tick_ms <= 0:
            raise ValueError("tick length must be positive")
        self.tick_ms = tick_ms
        self.time = SystemTime()
        self._alarms: deque[Alarm] = deque()

    @property
    def alarms(self) -> tuple[Alarm, ...]:
        """Registered alarms, most recently added first."""
        return tuple(self._alarms)

    def set_alarm(self, callback: Callable[[], object], period_ms: int) -> Alarm:
        """Call ``callback`` every ``period_ms`` milliseconds."""
        if period_ms < 0:
            raise ValueError("alarm period must not be negative")
        alarm = Alarm(callback=callback, period=period_ms, time_left=period_ms)
        self._alarms.appendleft(alarm)
        return alarm

    def tick(self) -> None:
        """Advance the clock by one timer interrupt and run due alarms."""
        self.time.seconds += 1
        for alarm in tuple(self._alarms):
            alarm.time_left -= self.tick_ms
            if alarm.time_left <= 0:
                alarm.time_left = alarm.period
                alarm.callback()