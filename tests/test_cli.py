import pytest

from mavrest.cli import Settings, parse_args


def test_default_arguments():
    settings = parse_args([])
    assert not settings.verbose
    assert settings.connect == "udpin:0.0.0.0:14550"
    assert settings.server == "0.0.0.0:8088"
    assert settings.mavlink_version == 2
    assert settings.default_api_version == 1
    assert not settings.send_initial_heartbeats


def test_default_system_and_component_id():
    assert parse_args([]).system_and_component_id() == (255, 0)


def test_parse_args_matches_default_settings():
    assert parse_args([]) == Settings()


def test_flags_and_values():
    settings = parse_args(
        [
            "-v",
            "--send-initial-heartbeats",
            "-c",
            "tcpout:127.0.0.1:5760",
            "--server",
            "127.0.0.1:9000",
            "--mavlink",
            "1",
            "--system-id",
            "42",
            "--component-id",
            "190",
        ]
    )
    assert settings.verbose
    assert settings.send_initial_heartbeats
    assert settings.connect == "tcpout:127.0.0.1:5760"
    assert settings.server == "127.0.0.1:9000"
    assert settings.mavlink_version == 1
    assert settings.system_and_component_id() == (42, 190)


@pytest.mark.parametrize(
    "argv",
    [
        ["--mavlink", "3"],
        ["--default-api-version", "2"],
        ["--system-id", "256"],
        ["--component-id", "-1"],
        ["--system-id", "abc"],
    ],
)
def test_invalid_arguments_exit(argv):
    with pytest.raises(SystemExit):
        parse_args(argv)