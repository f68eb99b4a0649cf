"""Connection to a MAVLink vehicle, with heartbeat and receive threads."""

from __future__ import annotations

import dataclasses
import json
import logging
import queue
import socket
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol

from .messages import MAVLinkMessage, MavHeader, heartbeat_message

_log = logging.getLogger(__name__)

_UDP_KINDS = ("udpin", "udpout", "udpbcast")
_INITIAL_HEARTBEATS = 5


@dataclass(frozen=True)
class ConnectionAddress:
    """Parsed form of a connection string such as ``udpin:0.0.0.0:14550``."""

    kind: str
    address: str
    port: Optional[int] = None


def parse_connection_string(connection_string: str) -> ConnectionAddress:
    """Split a connection string into its kind, address and port."""
    kind, sep, rest = connection_string.partition(":")
    if not sep or not rest:
        raise ValueError(f"Invalid connection string: {connection_string!r}")
    if kind == "file":
        return ConnectionAddress(kind, rest)
    if kind not in _UDP_KINDS:
        raise ValueError(f"Unknown connection type: {kind!r}")
    host, sep, port_text = rest.rpartition(":")
    if not sep or not host:
        raise ValueError(f"Connection string needs an address and a port: {connection_string!r}")
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"Invalid port: {port_text!r}") from None
    if not 0 <= port <= 65535:
        raise ValueError(f"Invalid port: {port}")
    return ConnectionAddress(kind, host, port)


class Connection(Protocol):
    def send(self, header: MavHeader, message: dict[str, Any]) -> int: ...

    def recv(self) -> MAVLinkMessage: ...


def _encode(header: MavHeader, message: dict[str, Any]) -> bytes:
    return json.dumps(MAVLinkMessage(header, message).to_dict()).encode("utf-8")


class _UdpConnection:
    """Datagram transport carrying one JSON-encoded message per packet."""

    def __init__(self, address: ConnectionAddress, timeout: float = 0.5) -> None:
        self._listen = address.kind == "udpin"
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self._sock.settimeout(timeout)
        target = (address.address, address.port)
        self._peer: Optional[tuple[str, int]] = None
        if self._listen:
            self._sock.bind(target)
        else:
            if address.kind == "udpbcast":
                self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            self._peer = target

    def send(self, header: MavHeader, message: dict[str, Any]) -> int:
        if self._peer is None:
            return 0
        return self._sock.sendto(_encode(header, message), self._peer)

    def recv(self) -> MAVLinkMessage:
        while True:
            payload, peer = self._sock.recvfrom(65535)
            if self._listen:
                self._peer = peer
            try:
                return MAVLinkMessage.from_dict(json.loads(payload))
            except ValueError as error:
                _log.error("Discarding invalid packet: %s", error)


class _FileConnection:
    """Replays JSON messages from a file, one per line; sent messages are kept in memory."""

    def __init__(self, path: str) -> None:
        self._lines = Path(path).read_text(encoding="utf-8").splitlines()
        self._position = 0
        self.sent: list[bytes] = []

    def send(self, header: MavHeader, message: dict[str, Any]) -> int:
        payload = _encode(header, message)
        self.sent.append(payload)
        return len(payload)

    def recv(self) -> MAVLinkMessage:
        while self._position < len(self._lines):
            line = self._lines[self._position].strip()
            self._position += 1
            if not line:
                continue
            try:
                return MAVLinkMessage.from_dict(json.loads(line))
            except ValueError as error:
                _log.error("Discarding invalid line: %s", error)
        raise EOFError("end of file")


def _open(address: ConnectionAddress) -> Connection:
    if address.kind == "file":
        return _FileConnection(address.address)
    return _UdpConnection(address)


class MAVLinkVehicle:
    """A connection together with the header this service sends with."""

    def __init__(
        self,
        connection: Connection,
        system_id: int = 255,
        component_id: int = 0,
        version: int = 2,
    ) -> None:
        if version not in (1, 2):
            raise ValueError("Invalid mavlink version.")
        self.connection = connection
        self.version = version
        self.header = MavHeader(system_id, component_id, 0)
        self._lock = threading.Lock()

    @classmethod
    def connect(
        cls,
        connection_string: str,
        system_id: int = 255,
        component_id: int = 0,
        version: int = 2,
    ) -> MAVLinkVehicle:
        """Open the connection described by ``connection_string``."""
        return cls(_open(parse_connection_string(connection_string)), system_id, component_id, version)

    def send(self, header: MavHeader, message: dict[str, Any]) -> int:
        """Send ``message`` with ``header``; transport failures raise OSError."""
        return self.connection.send(header, message)

    def recv(self) -> MAVLinkMessage:
        return self.connection.recv()

    def send_heartbeat(self) -> None:
        """Send one heartbeat and advance the sequence number."""
        with self._lock:
            header = dataclasses.replace(self.header)
            try:
                self.connection.send(header, heartbeat_message())
            except OSError as error:
                _log.error("Failed to send heartbeat: %s", error)
            self.header.sequence = (self.header.sequence + 1) % 256


class MAVLinkVehicleHandle:
    """Runs the heartbeat and receive loops of a vehicle in background threads."""

    def __init__(
        self,
        vehicle: MAVLinkVehicle,
        send_initial_heartbeats: bool = False,
        heartbeat_interval: float = 1.0,
        initial_delay: float = 2.0,
        burst_interval: float = 0.1,
    ) -> None:
        self.vehicle = vehicle
        self.send_initial_heartbeats = send_initial_heartbeats
        self.heartbeat_interval = heartbeat_interval
        self.initial_delay = initial_delay
        self.burst_interval = burst_interval
        self._queue: queue.Queue[MAVLinkMessage] = queue.Queue()
        self._stop = threading.Event()
        self._finished = threading.Event()
        self._threads: list[threading.Thread] = []

    @property
    def finished(self) -> bool:
        """True once the connection has reached its end."""
        return self._finished.is_set()

    def start(self) -> None:
        """Optionally wake the link with a heartbeat burst, then start the loops."""
        if self.send_initial_heartbeats:
            time.sleep(self.initial_delay)
            for _ in range(_INITIAL_HEARTBEATS):
                self.vehicle.send_heartbeat()
                time.sleep(self.burst_interval)
        self._threads = [
            threading.Thread(target=self._heartbeat_loop, daemon=True),
            threading.Thread(target=self._receive_loop, daemon=True),
        ]
        for thread in self._threads:
            thread.start()

    def stop(self) -> None:
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout=2.0)
        self._threads = []

    def receive(self, timeout: Optional[float] = None) -> Optional[MAVLinkMessage]:
        """Return the next received message, or None if none came within ``timeout``."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def _heartbeat_loop(self) -> None:
        while not self._stop.wait(self.heartbeat_interval):
            self.vehicle.send_heartbeat()

    def _receive_loop(self) -> None:
        while not self._stop.is_set():
            try:
                message = self.vehicle.recv()
            except TimeoutError:
                continue
            except EOFError:
                _log.info("Connection reached its end")
                self._finished.set()
                return
            except (OSError, ValueError) as error:
                _log.error("Recv error: %s", error)
                continue
            self._queue.put(message)