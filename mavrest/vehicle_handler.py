"""Collection of received messages into one JSON document with statistics."""

from __future__ import annotations

import copy
import threading
from collections.abc import Callable
from typing import Any, Optional

from .message_information import Clock, MessageInformation
from .messages import message_name

MessageCallback = Callable[[dict[str, Any], str], Any]


class MessageCollector:
    """Keeps the last message of each type under ``{"mavlink": {...}}``."""

    def __init__(
        self,
        verbose: bool = False,
        new_message_callback: Optional[MessageCallback] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.verbose = verbose
        self.new_message_callback = new_message_callback
        self._clock = clock
        self._messages: dict[str, Any] = {"mavlink": {}}
        self._information: dict[str, MessageInformation] = {}
        self._lock = threading.Lock()

    def _new_information(self) -> MessageInformation:
        if self._clock is not None:
            return MessageInformation(clock=self._clock)
        return MessageInformation()

    def process(self, message: dict[str, Any]) -> dict[str, Any]:
        """Store ``message``, update its statistics and return the stored entry."""
        name = message_name(message)
        with self._lock:
            entry = copy.deepcopy(message)
            if self.verbose:
                print(f"Got: {name}")
            information = self._information.get(name)
            if information is None:
                information = self._new_information()
                self._information[name] = information
            information.update()
            entry["message_information"] = information.to_dict()
            self._messages["mavlink"][name] = entry
            result = copy.deepcopy(entry)
        if self.new_message_callback is not None:
            self.new_message_callback(result, name)
        return result

    def snapshot(self) -> dict[str, Any]:
        """Return a copy of every message collected so far."""
        with self._lock:
            return copy.deepcopy(self._messages)