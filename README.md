# mavrest

A small HTTP server that exposes a MAVLink vehicle through a REST API and
websockets. It keeps the last message of each kind received from every
vehicle and component, counts them and works out how often they arrive, and
it lets clients send messages back to the vehicle.

## Installation

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Running

```
mavrest
```

By default this listens on `udpin:0.0.0.0:14550` and serves the API on
`0.0.0.0:8088`. While running it sends a heartbeat to the vehicle every
second.

| Option | Default | Meaning |
| --- | --- | --- |
| `-c`, `--connect TYPE:<IP/SERIAL>:<PORT/BAUDRATE>` | `udpin:0.0.0.0:14550` | Connection string |
| `-s`, `--server IP:PORT` | `0.0.0.0:8088` | Address of the HTTP server |
| `--mavlink VERSION` | `2` | Protocol version, `1` or `2` |
| `--system-id SYSTEM_ID` | `255` | System ID of this service (0-255) |
| `--component-id COMPONENT_ID` | `0` | Component ID of this service (0-255) |
| `--default-api-version DEFAULT_API_VERSION` | `1` | API version also served without a prefix; only `1` is accepted |
| `-v`, `--verbose` | off | Debug logging |
| `--send-initial-heartbeats` | off | Wait two seconds, then send five heartbeats 0.1 s apart before starting (useful for PX4-like autopilots) |
| `--version` | | Print the version and exit |

Connection strings understood by `mavrest.mavlink_vehicle.parse_connection_string`:

- `udpin:<address>:<port>` binds to the address and replies to the last peer heard from.
- `udpout:<address>:<port>` sends to the given address.
- `udpbcast:<address>:<port>` sends to a broadcast address.
- `file:<path>` reads messages from a file, one per line; sent messages are
  kept in memory. When the file is exhausted the service shuts down.

## Endpoints

Every API route is served under `/v1` and also without a prefix.

- `GET /info`: name and version of the service (`sha`, `build_date` and
  `authors` are empty strings).
- `GET /mavlink`: every message received, as
  `{"vehicles": {"<system id>": {"id": ..., "components": {"<component id>":
  {"id": ..., "messages": {"<NAME>": {"message": ..., "status": {"time":
  {...}}}}}}}}}`. The `time` object holds `first_update`, `last_update`,
  `counter` and `frequency`.
- `GET /mavlink/<path>`: the part of that document found at the JSON pointer
  `/<path>`, for example `/mavlink/vehicles/1/components/1/messages/HEARTBEAT`.
  The body is the text `None` when nothing is there.
- `POST /mavlink`: send a message given as
  `{"header": {"system_id": ..., "component_id": ..., "sequence": ...},
  "message": {"type": "NAME", ...}}`. On success the message is also stored as
  if it had been received. Errors are answered with status 404 and a text
  explaining them.
- `GET /helper/mavlink?name=NAME`: a header and message with default fields,
  ready to fill in and post. Templates exist for `HEARTBEAT`, `ATTITUDE`,
  `PARAM_REQUEST_LIST`, `REQUEST_DATA_STREAM` and `COMMAND_LONG`; other names
  give 404.
- `GET /ws/mavlink?filter=<regex>`: websocket streaming every received message
  (header and message) whose name the regular expression finds; all messages
  when no filter is given, none when the filter is invalid. Text sent on the
  websocket is parsed as a message and sent to the vehicle; the reply is
  `Ok(<bytes sent>)`, `Err(<reason>)` or `Could not convert input message.`
- `GET /` and `GET /<file>.html|.js|.css`: files from the `html` directory next
  to `mavrest/endpoints.py` (or the directory stored under the application key
  `html_dir`); 404 with `File does not exist` otherwise.

All responses allow cross-origin requests.

## Using it as a library

```python
from mavrest.data import VehiclesData
from mavrest.messages import MAVLinkMessage, MavHeader, heartbeat_message

data = VehiclesData()
data.update(MAVLinkMessage(MavHeader(system_id=1, component_id=1), heartbeat_message()))
print(data.pointer("vehicles/1/components/1/messages/HEARTBEAT/status/time/counter"))  # 2
```

- `mavrest.cli.parse_args(argv)` returns a `Settings` dataclass.
- `mavrest.messages` holds `MavHeader`, `MAVLinkMessage` (with `to_dict` and
  `from_dict`), `default_message`, `heartbeat_message` and
  `request_stream_message`.
- `mavrest.data.VehiclesData` is the thread-safe store behind `/mavlink`.
- `mavrest.vehicle_handler.MessageCollector` keeps the last message of each
  type under `{"mavlink": {...}}` with a `message_information` entry
  (`mavrest.message_information.MessageInformation`) and an optional callback.
- `mavrest.websocket_manager.WebsocketManager` fans messages out to
  `WebsocketClient` objects by name.
- `mavrest.mavlink_vehicle.MAVLinkVehicle` and `MAVLinkVehicleHandle` own the
  connection and its heartbeat and receive threads.
- `mavrest.server.create_app(vehicle, data, manager, default_api_version)`
  builds the aiohttp application, so it can be embedded in another service;
  `mavrest.server.ws_callback` is the websocket send handler.

## What it does not do

- It does not speak the binary MAVLink wire protocol. Over UDP and in files
  every message is a JSON object `{"header": {...}, "message": {...}}`, one per
  datagram or line. The `--mavlink` version is checked but does not change the
  encoding.
- Serial connections are not supported; only the `udpin`, `udpout`,
  `udpbcast` and `file` kinds are.
- Message fields are only checked for the five message types that have
  templates; any other message with a `type` is accepted as given.
- No web page files are shipped: `/` answers 404 unless an `html` directory
  is provided.
- There is no OpenAPI description or documentation page.