import json

import pytest
from aiohttp.test_utils import TestClient, TestServer

from mavrest.data import VehiclesData
from mavrest.messages import MAVLinkMessage, MavHeader, heartbeat_message
from mavrest.server import create_app, ws_callback
from mavrest.websocket_manager import WebsocketManager


class FakeVehicle:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, header, message):
        if self.fail:
            raise OSError("down")
        self.sent.append((header, message))
        return 17


VALUE = json.dumps(
    {"header": {"system_id": 3, "component_id": 1, "sequence": 0}, "message": heartbeat_message()}
)


def test_ws_callback_success_updates_data():
    data = VehiclesData()
    vehicle = FakeVehicle()
    assert ws_callback(vehicle, data, VALUE) == "Ok(17)"
    assert json.loads(data.pointer("vehicles/3/id")) == 3


def test_ws_callback_invalid_input():
    data = VehiclesData()
    assert ws_callback(FakeVehicle(), data, "garbage") == "Could not convert input message."
    assert data.pointer("vehicles/3") == "None"


def test_ws_callback_send_failure_leaves_data():
    data = VehiclesData()
    assert ws_callback(FakeVehicle(fail=True), data, VALUE).startswith("Err(")
    assert data.pointer("vehicles/3") == "None"


def test_unsupported_api_version():
    with pytest.raises(ValueError):
        create_app(FakeVehicle(), VehiclesData(), WebsocketManager(), 2)


@pytest.mark.asyncio
async def test_cors_and_prefixes():
    app = create_app(FakeVehicle(), VehiclesData(), WebsocketManager(), 1)
    async with TestClient(TestServer(app)) as client:
        a = await client.get("/v1/mavlink", headers={"Origin": "http://example.com"})
        b = await client.get("/mavlink")
        assert a.headers["Access-Control-Allow-Origin"] == "http://example.com"
        assert json.loads(await a.text()) == json.loads(await b.text())


@pytest.mark.asyncio
async def test_websocket_roundtrip_and_broadcast():
    data = VehiclesData()
    vehicle = FakeVehicle()
    manager = WebsocketManager(lambda text: ws_callback(vehicle, data, text))
    app = create_app(vehicle, data, manager, 1)
    async with TestClient(TestServer(app)) as client:
        ws = await client.ws_connect("/v1/ws/mavlink", params={"filter": "HEART"})
        await ws.send_str(VALUE)
        assert await ws.receive_str(timeout=2) == "Ok(17)"
        manager.broadcast(MAVLinkMessage(MavHeader(1, 1, 0), heartbeat_message()))
        received = json.loads(await ws.receive_str(timeout=2))
        assert received["message"] == heartbeat_message()
        await ws.close()
    assert manager.clients == []