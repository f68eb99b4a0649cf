"""Application assembly and the service's entry point."""

from __future__ import annotations

import functools
import json
import logging
import signal
import threading
from typing import Any, Optional, Sequence

from aiohttp import web

from . import endpoints
from .cli import parse_args
from .data import VehiclesData
from .mavlink_vehicle import MAVLinkVehicle, MAVLinkVehicleHandle
from .messages import MAVLinkMessage
from .websocket_manager import WebsocketManager

_log = logging.getLogger(__name__)


@web.middleware
async def _cors(request: web.Request, handler: Any) -> web.StreamResponse:
    if request.method == "OPTIONS" and "Access-Control-Request-Method" in request.headers:
        response: web.StreamResponse = web.Response()
        response.headers["Access-Control-Allow-Methods"] = request.headers[
            "Access-Control-Request-Method"
        ]
        requested = request.headers.get("Access-Control-Request-Headers")
        if requested:
            response.headers["Access-Control-Allow-Headers"] = requested
    else:
        response = await handler(request)
    if not response.prepared:
        response.headers["Access-Control-Allow-Origin"] = request.headers.get("Origin", "*")
    return response


def _add_v1_paths(router: web.UrlDispatcher, prefix: str) -> None:
    router.add_get(f"{prefix}/helper/mavlink", endpoints.helper_mavlink)
    router.add_get(f"{prefix}/mavlink", endpoints.mavlink)
    router.add_post(f"{prefix}/mavlink", endpoints.mavlink_post)
    router.add_get(prefix + "/mavlink/{path:.*}", endpoints.mavlink)
    router.add_get(f"{prefix}/ws/mavlink", endpoints.websocket)


def create_app(
    vehicle: Any,
    data: VehiclesData,
    manager: WebsocketManager,
    default_api_version: int = 1,
) -> web.Application:
    """Build the web application serving the REST API."""
    if default_api_version != 1:
        raise ValueError(f"Unsupported API version: {default_api_version}")
    app = web.Application(middlewares=[_cors])
    app["vehicle"] = vehicle
    app["data"] = data
    app["manager"] = manager
    router = app.router
    router.add_get("/", endpoints.root)
    router.add_get(r"/{filename:.*\.(?:html|js|css)}", endpoints.root)
    router.add_get("/info", endpoints.info)
    _add_v1_paths(router, "/v1")
    _add_v1_paths(router, "")
    return app


def ws_callback(vehicle: Any, data: VehiclesData, value: str) -> str:
    """Send a message received on a websocket and describe the outcome."""
    try:
        content = MAVLinkMessage.from_dict(json.loads(value))
    except ValueError:
        return "Could not convert input message."
    try:
        sent = vehicle.send(content.header, content.message)
    except OSError as error:
        return f"Err({error})"
    data.update(content)
    return f"Ok({sent})"


def _forward(handle: MAVLinkVehicleHandle, data: VehiclesData, manager: WebsocketManager) -> None:
    while True:
        message = handle.receive(timeout=0.5)
        if message is None:
            if handle.finished:
                signal.raise_signal(signal.SIGINT)
                return
            continue
        _log.debug("Received: %s", message)
        manager.broadcast(message)
        data.update(message)


def _split_address(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"Server address must be IP:PORT, got {address!r}")
    return host, int(port)


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if settings.verbose else logging.WARNING)
    system_id, component_id = settings.system_and_component_id()
    vehicle = MAVLinkVehicle.connect(
        settings.connect, system_id, component_id, settings.mavlink_version
    )
    handle = MAVLinkVehicleHandle(vehicle, settings.send_initial_heartbeats)
    data = VehiclesData()
    manager = WebsocketManager(functools.partial(ws_callback, vehicle, data))
    app = create_app(vehicle, data, manager, settings.default_api_version)
    host, port = _split_address(settings.server)

    handle.start()
    threading.Thread(target=_forward, args=(handle, data, manager), daemon=True).start()
    print(f"Server running: http://{settings.server}")
    try:
        web.run_app(app, host=host, port=port, print=None)
    finally:
        handle.stop()
    return 0