import json

import pytest

from mavrest.messages import MAVLinkMessage, MavHeader, heartbeat_message
from mavrest.websocket_manager import WebsocketClient, WebsocketManager


@pytest.mark.parametrize(
    ("pattern", "name", "expected"),
    [
        (".*", "HEARTBEAT", True),
        ("^ATT", "HEARTBEAT", False),
        ("BEAT", "HEARTBEAT", True),
        ("HEARTBEAT|ATTITUDE", "ATTITUDE", True),
        ("(", "HEARTBEAT", False),
    ],
)
def test_client_matches(pattern, name, expected):
    assert WebsocketClient(pattern, lambda text: None).matches(name) is expected


def test_send_only_to_matching_clients():
    manager = WebsocketManager()
    heard, ignored = [], []
    manager.add_client(WebsocketClient("HEART", heard.append))
    manager.add_client(WebsocketClient("^ATTITUDE$", ignored.append))
    value = {"a": 1, "b": [1, 2]}
    manager.send(value, "HEARTBEAT")
    assert len(heard) == 1
    assert json.loads(heard[0]) == value
    assert ignored == []


def test_send_is_pretty_printed():
    manager = WebsocketManager()
    received = []
    manager.add_client(WebsocketClient(".*", received.append))
    manager.send({"a": 1}, "X")
    assert received == [json.dumps({"a": 1}, indent=2)]


def test_broadcast_sends_header_and_message():
    manager = WebsocketManager()
    received = []
    manager.add_client(WebsocketClient("HEARTBEAT", received.append))
    message = MAVLinkMessage(MavHeader(1, 1, 3), heartbeat_message())
    manager.broadcast(message)
    assert [json.loads(text) for text in received] == [message.to_dict()]


def test_remove_client_stops_delivery():
    manager = WebsocketManager()
    received = []
    client = WebsocketClient(".*", received.append)
    manager.add_client(client)
    manager.remove_client(client)
    manager.send({"a": 1}, "X")
    assert received == []
    assert manager.clients == []


def test_remove_keeps_other_clients():
    manager = WebsocketManager()
    first = WebsocketClient(".*", lambda text: None)
    second = WebsocketClient(".*", lambda text: None)
    manager.add_client(first)
    manager.add_client(second)
    manager.remove_client(first)
    assert manager.clients == [second]


def test_handle_text_without_callback():
    reply = WebsocketManager().handle_text("{}")
    assert json.loads(reply) == {"error": "MAVLink callback does not exist."}


def test_handle_text_uses_callback():
    manager = WebsocketManager(new_message_callback=lambda text: text.upper())
    assert manager.handle_text("abc") == "ABC"