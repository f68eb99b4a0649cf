"""Fan-out of MAVLink messages to websocket clients filtered by message name."""

from __future__ import annotations

import json
import re
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional

from .messages import MAVLinkMessage

CALLBACK_MISSING = "MAVLink callback does not exist."


@dataclass(eq=False)
class WebsocketClient:
    """A connected client receiving the messages whose names match ``filter``."""

    filter: str
    deliver: Callable[[str], Any]
    pattern: Optional[re.Pattern[str]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            self.pattern = re.compile(self.filter)
        except re.error:
            self.pattern = None

    def matches(self, name: str) -> bool:
        """True if the filter finds ``name``; an invalid filter matches nothing."""
        return self.pattern is not None and self.pattern.search(name) is not None


class WebsocketManager:
    """Registry of websocket clients and the handler for text they send."""

    def __init__(self, new_message_callback: Optional[Callable[[str], str]] = None) -> None:
        self.new_message_callback = new_message_callback
        self._clients: list[WebsocketClient] = []
        self._lock = threading.Lock()

    @property
    def clients(self) -> list[WebsocketClient]:
        with self._lock:
            return list(self._clients)

    def add_client(self, client: WebsocketClient) -> None:
        with self._lock:
            self._clients.append(client)

    def remove_client(self, client: WebsocketClient) -> None:
        with self._lock:
            self._clients = [c for c in self._clients if c is not client]

    def send(self, value: Any, name: str) -> None:
        """Send ``value`` as pretty JSON to every client whose filter matches ``name``."""
        clients = self.clients
        if not clients:
            return
        text = json.dumps(value, indent=2, ensure_ascii=False)
        for client in clients:
            if client.matches(name):
                client.deliver(text)

    def broadcast(self, message: MAVLinkMessage) -> None:
        """Send a header-and-message pair to the interested clients."""
        self.send(message.to_dict(), message.name)

    def handle_text(self, text: str) -> str:
        """Answer text received from a client."""
        callback = self.new_message_callback
        if callback is None:
            return json.dumps({"error": CALLBACK_MISSING}, separators=(",", ":"))
        return callback(text)