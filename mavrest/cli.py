"""Command-line settings for the MAVLink REST service."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import dataclass

PROGRAM_NAME = "mavrest"
VERSION = "0.11.25"

DEFAULT_CONNECTION = "udpin:0.0.0.0:14550"
DEFAULT_SERVER = "0.0.0.0:8088"


@dataclass(frozen=True)
class Settings:
    """Options the service was started with."""

    connect: str = DEFAULT_CONNECTION
    server: str = DEFAULT_SERVER
    mavlink_version: int = 2
    system_id: int = 255
    component_id: int = 0
    default_api_version: int = 1
    verbose: bool = False
    send_initial_heartbeats: bool = False

    def system_and_component_id(self) -> tuple[int, int]:
        """Return the (system id, component id) pair used by this service."""
        return self.system_id, self.component_id


def _u8(label: str):
    def convert(text: str) -> int:
        try:
            value = int(text)
        except ValueError:
            raise argparse.ArgumentTypeError(
                f"{label} should be a value between 1-255."
            ) from None
        if not 0 <= value <= 255:
            raise argparse.ArgumentTypeError(f"{label} should be a value between 1-255.")
        return value

    return convert


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROGRAM_NAME, description="MAVLink to REST API!")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "-c",
        "--connect",
        metavar="TYPE:<IP/SERIAL>:<PORT/BAUDRATE>",
        default=DEFAULT_CONNECTION,
        help="Sets the mavlink connection string",
    )
    parser.add_argument(
        "-s",
        "--server",
        metavar="IP:PORT",
        default=DEFAULT_SERVER,
        help="Sets the IP and port that the rest server will be provided",
    )
    parser.add_argument(
        "--mavlink",
        dest="mavlink_version",
        metavar="VERSION",
        type=int,
        choices=(1, 2),
        default=2,
        help="Sets the mavlink version used to communicate",
    )
    parser.add_argument(
        "--system-id",
        dest="system_id",
        metavar="SYSTEM_ID",
        type=_u8("System ID"),
        default=255,
        help="Sets system ID for this service.",
    )
    parser.add_argument(
        "--component-id",
        dest="component_id",
        metavar="COMPONENT_ID",
        type=_u8("Component ID"),
        default=0,
        help="Sets the component ID for this service.",
    )
    parser.add_argument(
        "--default-api-version",
        dest="default_api_version",
        metavar="DEFAULT_API_VERSION",
        type=int,
        choices=(1,),
        default=1,
        help="Sets the default version used by the REST API, "
        "this will remove the prefix used by its path.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Be verbose")
    parser.add_argument(
        "--send-initial-heartbeats",
        dest="send_initial_heartbeats",
        action="store_true",
        help="Send a burst of initial heartbeats to the autopilot spaced by 0.1 seconds "
        "to wake up MAVLink connection (useful for PX4-like autopilots).",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command-line arguments into :class:`Settings`.

    Invalid arguments make the parser exit with ``SystemExit``.
    """
    namespace = _build_parser().parse_args(argv)
    return Settings(
        connect=namespace.connect,
        server=namespace.server,
        mavlink_version=namespace.mavlink_version,
        system_id=namespace.system_id,
        component_id=namespace.component_id,
        default_api_version=namespace.default_api_version,
        verbose=namespace.verbose,
        send_initial_heartbeats=namespace.send_initial_heartbeats,
    )