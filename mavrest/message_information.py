"""Reception statistics kept per MAVLink message."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

Clock = Callable[[], datetime]

_U32_MASK = (1 << 32) - 1
_I64_MIN = -(1 << 63)
_I64_RANGE = 1 << 64


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _rate(counter: int, first: datetime, last: datetime) -> float:
    seconds = int((last - first).total_seconds())
    if seconds == 0:
        if counter == 0:
            return math.nan
        return math.copysign(math.inf, counter)
    return counter / seconds


def _json_float(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


@dataclass
class MessageInformation:
    """Counter, frequency and timing of one message type."""

    counter: int = 0
    frequency: float = 0.0
    first_message: Optional[datetime] = None
    last_message: Optional[datetime] = None
    clock: Clock = field(default=_local_now, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.first_message is None:
            self.first_message = self.clock()
        if self.last_message is None:
            self.last_message = self.clock()

    def update(self) -> None:
        """Record the arrival of one more message."""
        self.counter = (self.counter + 1) & _U32_MASK
        self.last_message = self.clock()
        self.frequency = _rate(self.counter, self.first_message, self.last_message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "counter": self.counter,
            "frequency": _json_float(self.frequency),
            "time": {
                "first_message": self.first_message.isoformat(),
                "last_message": self.last_message.isoformat(),
            },
        }


@dataclass
class Temporal:
    """Update counter and rate of a message stored for a vehicle component."""

    first_update: Optional[datetime] = None
    last_update: Optional[datetime] = None
    counter: int = 1
    frequency: float = 0.0
    clock: Clock = field(default=_local_now, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.first_update is None:
            self.first_update = self.clock()
        if self.last_update is None:
            self.last_update = self.clock()

    def update(self) -> None:
        """Record one more update; the counter wraps like a signed 64-bit value."""
        self.last_update = self.clock()
        self.counter = (self.counter + 1 - _I64_MIN) % _I64_RANGE + _I64_MIN
        self.frequency = _rate(self.counter, self.first_update, self.last_update)

    def to_dict(self) -> dict[str, Any]:
        return {
            "first_update": self.first_update.isoformat(),
            "last_update": self.last_update.isoformat(),
            "counter": self.counter,
            "frequency": _json_float(self.frequency),
        }