from datetime import datetime, timezone

import pytest

from mavrest.messages import heartbeat_message, request_stream_message
from mavrest.vehicle_handler import MessageCollector


def _clock():
    return datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_process_stores_message_with_information():
    collector = MessageCollector(clock=_clock)
    collector.process(heartbeat_message())
    entry = collector.snapshot()["mavlink"]["HEARTBEAT"]
    assert entry["type"] == "HEARTBEAT"
    assert entry["custom_mode"] == heartbeat_message()["custom_mode"]
    assert entry["message_information"]["counter"] == 1


def test_counter_grows_per_message():
    collector = MessageCollector(clock=_clock)
    first = collector.process(heartbeat_message())
    second = collector.process(heartbeat_message())
    assert (
        second["message_information"]["counter"]
        == first["message_information"]["counter"] + 1
    )


def test_messages_are_kept_by_type():
    collector = MessageCollector(clock=_clock)
    collector.process(heartbeat_message())
    collector.process(request_stream_message())
    assert set(collector.snapshot()["mavlink"]) == {"HEARTBEAT", "REQUEST_DATA_STREAM"}


def test_callback_receives_entry_and_name():
    calls = []
    collector = MessageCollector(
        new_message_callback=lambda value, name: calls.append((value, name)), clock=_clock
    )
    returned = collector.process(heartbeat_message())
    assert calls == [(returned, "HEARTBEAT")]
    assert calls[0][0] == collector.snapshot()["mavlink"]["HEARTBEAT"]


def test_input_is_not_modified():
    collector = MessageCollector(clock=_clock)
    message = heartbeat_message()
    collector.process(message)
    assert message == heartbeat_message()


def test_snapshot_is_a_copy():
    collector = MessageCollector(clock=_clock)
    collector.process(heartbeat_message())
    snap = collector.snapshot()
    snap["mavlink"].clear()
    assert "HEARTBEAT" in collector.snapshot()["mavlink"]


def test_message_without_type_is_rejected():
    with pytest.raises(ValueError):
        MessageCollector().process({"custom_mode": 0})


def test_verbose_reports_message(capsys):
    MessageCollector(verbose=True, clock=_clock).process(heartbeat_message())
    assert "Got: HEARTBEAT" in capsys.readouterr().out