"""REST and websocket service exposing MAVLink vehicles, with its building blocks."""

__version__ = "0.11.25"
__all__ = [
    "cli",
    "data",
    "endpoints",
    "mavlink_vehicle",
    "message_information",
    "messages",
    "server",
    "vehicle_handler",
    "websocket_manager",
]