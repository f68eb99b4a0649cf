"""Latest MAVLink messages received, organised per vehicle and component."""

from __future__ import annotations

import copy
import dataclasses
import json
import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from .message_information import Clock, Temporal
from .messages import MAVLinkMessage

_log = logging.getLogger(__name__)

_ARRAY_INDEX = re.compile(r"0|[1-9][0-9]*")


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _resolve(document: Any, pointer: str) -> Any:
    """Follow a JSON pointer through ``document``; raise LookupError if it leads nowhere."""
    if not pointer.startswith("/"):
        raise LookupError(pointer)
    value = document
    for raw in pointer.split("/")[1:]:
        segment = raw.replace("~1", "/").replace("~0", "~")
        if isinstance(value, dict):
            value = value[segment]
        elif isinstance(value, list):
            if not _ARRAY_INDEX.fullmatch(segment):
                raise LookupError(segment)
            value = value[int(segment)]
        else:
            raise LookupError(segment)
    return value


@dataclass
class _MessageStatus:
    message: dict[str, Any]
    status: Temporal

    def copy(self) -> _MessageStatus:
        return _MessageStatus(copy.deepcopy(self.message), dataclasses.replace(self.status))

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": copy.deepcopy(self.message),
            "status": {"time": self.status.to_dict()},
        }


@dataclass
class _Component:
    id: int
    messages: dict[str, _MessageStatus] = field(default_factory=dict)

    def copy(self) -> _Component:
        return _Component(self.id, {name: s.copy() for name, s in self.messages.items()})

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "messages": {name: s.to_dict() for name, s in self.messages.items()},
        }


@dataclass
class _Vehicle:
    id: int
    components: dict[int, _Component] = field(default_factory=dict)

    def copy(self) -> _Vehicle:
        return _Vehicle(self.id, {cid: c.copy() for cid, c in self.components.items()})

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "components": {str(cid): c.to_dict() for cid, c in self.components.items()},
        }


class VehiclesData:
    """Thread-safe store of the last message of each kind from every vehicle component."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock
        self._vehicles: dict[int, _Vehicle] = {}
        self._lock = threading.RLock()

    def _new_temporal(self) -> Temporal:
        return Temporal(clock=self._clock) if self._clock is not None else Temporal()

    def update(self, message: MAVLinkMessage) -> None:
        """Store ``message`` and refresh its reception statistics."""
        header = message.header
        name = message.name
        with self._lock:
            vehicle = self._vehicles.setdefault(header.system_id, _Vehicle(header.system_id))
            component = vehicle.components.setdefault(
                header.component_id, _Component(header.component_id)
            )
            status = component.messages.get(name)
            if status is None:
                status = _MessageStatus(copy.deepcopy(message.message), self._new_temporal())
                component.messages[name] = status
            status.message = copy.deepcopy(message.message)
            status.status.update()

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {
                "vehicles": {str(vid): v.to_dict() for vid, v in self._vehicles.items()}
            }

    def pointer(self, path: str) -> str:
        """Return the pretty JSON found at ``path``, or ``"None"`` if nothing is there."""
        document = self.to_dict()
        if not path:
            return _pretty(document)
        pointer = f"/{path}"
        _log.debug("Resolving pointer %s", pointer)
        if pointer == "/vehicles":
            return _pretty(document["vehicles"])
        try:
            value = _resolve(document, pointer)
        except LookupError:
            return "None"
        return _pretty(value)

    def snapshot(self) -> VehiclesData:
        """Return an independent copy of the current contents."""
        clone = VehiclesData(self._clock)
        with self._lock:
            clone._vehicles = {vid: v.copy() for vid, v in self._vehicles.items()}
        return clone