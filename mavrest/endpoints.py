"""HTTP and websocket handlers of the REST API."""

from __future__ import annotations

import asyncio
import json
import logging
import mimetypes
from pathlib import Path
from typing import Any, Optional

from aiohttp import WSMsgType, web

from .cli import PROGRAM_NAME, VERSION
from .messages import MAVLinkMessage, MavHeader, UnknownMessageError, default_message
from .websocket_manager import WebsocketClient

_log = logging.getLogger(__name__)

HTML_DIR = Path(__file__).resolve().parent / "html"

_PARSE_ERROR = "Not possible to parse mavlink message, please report this issue!"


def parse_query(message: Any) -> str:
    """Pretty JSON of ``message``, or a fixed error text if it cannot be encoded."""
    try:
        return json.dumps(message, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return _PARSE_ERROR


def _json_response(text: str, status: int = 200) -> web.Response:
    return web.Response(status=status, text=text, content_type="application/json")


def _load_html_file(directory: Path, filename: str) -> Optional[str]:
    base = directory.resolve()
    path = (base / filename).resolve()
    if base not in path.parents or not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


async def root(request: web.Request) -> web.Response:
    """Serve the bundled web page files."""
    filename = request.match_info.get("filename", "") or "index.html"
    directory = Path(request.app.get("html_dir", HTML_DIR))
    content = _load_html_file(directory, filename)
    if content is None:
        return web.Response(status=404, text="File does not exist", content_type="text/plain")
    mime = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return web.Response(text=content, content_type=mime)


async def info(request: web.Request) -> web.Response:
    """Information about the API and this program."""
    return web.json_response(
        {
            "version": 0,
            "service": {
                "name": PROGRAM_NAME,
                "version": VERSION,
                "sha": "",
                "build_date": "",
                "authors": "",
            },
        }
    )


async def mavlink(request: web.Request) -> web.Response:
    """All MAVLink messages received, or the part addressed by the path."""
    path = request.match_info.get("path", "")
    return _json_response(request.app["data"].snapshot().pointer(path))


async def helper_mavlink(request: web.Request) -> web.Response:
    """A message with default fields for the requested message name."""
    name = request.query.get("name")
    if name is None:
        raise web.HTTPBadRequest(text="Missing query parameter 'name'.")
    try:
        message = default_message(name)
    except UnknownMessageError as error:
        return _json_response(parse_query(str(error)), status=404)
    return _json_response(parse_query(MAVLinkMessage(MavHeader(), message).to_dict()))


async def mavlink_post(request: web.Request) -> web.Response:
    """Send a MAVLink message to the vehicle."""
    body = await request.read()
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as error:
        return _json_response(f"Failed to parse input as UTF-8 string: {error}", status=404)
    _log.debug("MAVLink post received: %s", text)
    try:
        content = MAVLinkMessage.from_dict(json.loads(text))
    except ValueError as error:
        _log.debug("Failed to parse message: %s", error)
        return _json_response("Failed to parse message, not a valid MAVLinkMessage.", status=404)
    try:
        request.app["vehicle"].send(content.header, content.message)
    except OSError as error:
        return _json_response(f"Failed to send message: {error}", status=404)
    request.app["data"].update(content)
    return web.Response()


async def websocket(request: web.Request) -> web.WebSocketResponse:
    """Stream messages matching the ``filter`` regex and accept messages to send."""
    pattern = request.query.get("filter", ".*")
    _log.debug("New websocket with filter %r", pattern)
    manager = request.app["manager"]
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    loop = asyncio.get_running_loop()
    outgoing: asyncio.Queue[str] = asyncio.Queue()

    def deliver(text: str) -> None:
        try:
            loop.call_soon_threadsafe(outgoing.put_nowait, text)
        except RuntimeError:
            pass

    async def pump() -> None:
        while True:
            text = await outgoing.get()
            try:
                await ws.send_str(text)
            except ConnectionResetError:
                return

    client = WebsocketClient(pattern, deliver)
    manager.add_client(client)
    sender = asyncio.create_task(pump())
    try:
        async for msg in ws:
            if msg.type == WSMsgType.TEXT:
                await ws.send_str(manager.handle_text(msg.data))
    finally:
        manager.remove_client(client)
        sender.cancel()
    return ws