"""MAVLink headers and messages in their JSON form."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any


class UnknownMessageError(LookupError):
    """Raised when a message name is not part of the known dialect."""


def _enum(name: str) -> dict[str, str]:
    return {"type": name}


def _flags(bits: int = 0) -> dict[str, int]:
    return {"bits": bits}


_DEFAULT_MESSAGES: dict[str, dict[str, Any]] = {
    "HEARTBEAT": {
        "type": "HEARTBEAT",
        "custom_mode": 0,
        "mavtype": _enum("MAV_TYPE_GENERIC"),
        "autopilot": _enum("MAV_AUTOPILOT_GENERIC"),
        "base_mode": _flags(),
        "system_status": _enum("MAV_STATE_UNINIT"),
        "mavlink_version": 0,
    },
    "ATTITUDE": {
        "type": "ATTITUDE",
        "time_boot_ms": 0,
        "roll": 0.0,
        "pitch": 0.0,
        "yaw": 0.0,
        "rollspeed": 0.0,
        "pitchspeed": 0.0,
        "yawspeed": 0.0,
    },
    "PARAM_REQUEST_LIST": {
        "type": "PARAM_REQUEST_LIST",
        "target_system": 0,
        "target_component": 0,
    },
    "REQUEST_DATA_STREAM": {
        "type": "REQUEST_DATA_STREAM",
        "req_message_rate": 0,
        "target_system": 0,
        "target_component": 0,
        "req_stream_id": 0,
        "start_stop": 0,
    },
    "COMMAND_LONG": {
        "type": "COMMAND_LONG",
        "param1": 0.0,
        "param2": 0.0,
        "param3": 0.0,
        "param4": 0.0,
        "param5": 0.0,
        "param6": 0.0,
        "param7": 0.0,
        "command": _enum("MAV_CMD_NAV_WAYPOINT"),
        "target_system": 0,
        "target_component": 0,
        "confirmation": 0,
    },
}


def _u8(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if not 0 <= value <= 255:
        raise ValueError(f"{name} must be between 0 and 255, got {value}")
    return value


@dataclass
class MavHeader:
    """Routing header carried by every MAVLink packet."""

    system_id: int = 255
    component_id: int = 0
    sequence: int = 0

    def __post_init__(self) -> None:
        _u8(self.system_id, "system_id")
        _u8(self.component_id, "component_id")
        _u8(self.sequence, "sequence")

    def to_dict(self) -> dict[str, int]:
        return {
            "system_id": self.system_id,
            "component_id": self.component_id,
            "sequence": self.sequence,
        }

    @classmethod
    def from_dict(cls, data: Any) -> MavHeader:
        if not isinstance(data, dict):
            raise ValueError("header must be an object")
        try:
            return cls(
                system_id=data["system_id"],
                component_id=data["component_id"],
                sequence=data["sequence"],
            )
        except KeyError as missing:
            raise ValueError(f"header is missing field {missing}") from None


def message_name(message: Any) -> str:
    """Return the name of a message given in its JSON form."""
    if isinstance(message, MAVLinkMessage):
        message = message.message
    if not isinstance(message, dict):
        raise ValueError("message must be an object")
    name = message.get("type")
    if not isinstance(name, str) or not name:
        raise ValueError("message has no type")
    return name


def _validate_message(message: Any) -> dict[str, Any]:
    name = message_name(message)
    template = _DEFAULT_MESSAGES.get(name)
    if template is not None:
        missing = [key for key in template if key not in message]
        if missing:
            raise ValueError(f"{name} is missing fields: {', '.join(missing)}")
    return copy.deepcopy(message)


@dataclass
class MAVLinkMessage:
    """A MAVLink message together with its header."""

    header: MavHeader = field(default_factory=MavHeader)
    message: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return message_name(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"header": self.header.to_dict(), "message": copy.deepcopy(self.message)}

    @classmethod
    def from_dict(cls, data: Any) -> MAVLinkMessage:
        if not isinstance(data, dict):
            raise ValueError("MAVLink message must be an object")
        if "header" not in data:
            raise ValueError("MAVLink message is missing field 'header'")
        if "message" not in data:
            raise ValueError("MAVLink message is missing field 'message'")
        return cls(
            header=MavHeader.from_dict(data["header"]),
            message=_validate_message(data["message"]),
        )


def default_message(name: str) -> dict[str, Any]:
    """Return the message called ``name`` with every field at its default."""
    try:
        return copy.deepcopy(_DEFAULT_MESSAGES[name])
    except KeyError:
        raise UnknownMessageError("Invalid message name.") from None


def heartbeat_message() -> dict[str, Any]:
    """Heartbeat announcing this service as an onboard controller."""
    return {
        "type": "HEARTBEAT",
        "custom_mode": 0,
        "mavtype": _enum("MAV_TYPE_ONBOARD_CONTROLLER"),
        "autopilot": _enum("MAV_AUTOPILOT_INVALID"),
        "base_mode": _flags(),
        "system_status": _enum("MAV_STATE_STANDBY"),
        "mavlink_version": 0x3,
    }


def request_stream_message() -> dict[str, Any]:
    """Request for all data streams at 10 Hz."""
    return {
        "type": "REQUEST_DATA_STREAM",
        "req_message_rate": 10,
        "target_system": 0,
        "target_component": 0,
        "req_stream_id": 0,
        "start_stop": 1,
    }