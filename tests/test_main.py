from __future__ import annotations

import pytest

from gauge_agent import main as agent_main
from gauge_agent.collectors.platform.linux import LinuxProbe
from gauge_agent.core.errors import InvalidConfiguration, UnsupportedPlatform
from gauge_agent.core.sender import GaugeSender, LoggingGaugeSink

from .helpers.fakes import RecordingSink, linux_runner


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text(
        "[agent]\n"
        "hostname = from-config\n"
        "interval = 30\n"
        "\n"
        "[logging]\n"
        f"log_file = {tmp_path / 'agent.log'}\n"
    )
    return str(path)


@pytest.fixture
def linux_probe(monkeypatch):
    def fake_platform_probe(store, logger=None, runner=None):
        return LinuxProbe(store, logger=logger, runner=linux_runner())

    monkeypatch.setattr(agent_main, "get_platform_probe", fake_platform_probe)


def test_run_once_sends_prefixed_gauges(config_path, linux_probe):
    sink = RecordingSink()

    sent = agent_main.run({"hostname": "web01", "config": config_path, "once": True, "sink": sink})

    assert sent == len(sink.gauges) > 0
    assert all(name.startswith("web01.") for name in sink.gauges)
    assert "web01.memory.total_mb" in sink.gauges
    assert "web01.disk.root.total_mb" in sink.gauges
    # Single cycle: no delta-based metrics yet
    assert "web01.cpu.user" not in sink.gauges
    assert "web01.cpu.load_1min" in sink.gauges


def test_hostname_and_interval_fall_back_to_config(config_path, linux_probe):
    agent = agent_main.GaugeAgent({"config": config_path, "sink": RecordingSink()})

    assert agent.hostname == "from-config"
    assert agent.interval == 30
    assert agent.scheduler.interval == 30


def test_options_object_with_none_values(config_path, linux_probe):
    class Args:
        config = config_path
        hostname = None
        interval = None
        dry_run = True
        sink = None

    agent = agent_main.GaugeAgent(Args())

    assert agent.hostname == "from-config"
    assert isinstance(agent.sink, LoggingGaugeSink)


def test_collector_sink_by_default(config_path, linux_probe):
    agent = agent_main.GaugeAgent({"config": config_path})
    try:
        assert isinstance(agent.sink, GaugeSender)
        assert "sender" in agent.get_status()
    finally:
        agent.shutdown()


def test_main_once_dry_run(config_path, linux_probe):
    assert agent_main.main(["--config", config_path, "--once", "--dry-run"]) == 0


def test_main_rejects_non_positive_interval(config_path):
    assert agent_main.main(["--config", config_path, "--interval", "0"]) == 1


def test_main_unsupported_platform(config_path, monkeypatch):
    def unsupported(store, logger=None, runner=None):
        raise UnsupportedPlatform("plan9")

    monkeypatch.setattr(agent_main, "get_platform_probe", unsupported)

    assert agent_main.main(["--config", config_path, "--once"]) == 1


def test_main_create_and_validate_config(tmp_path):
    path = str(tmp_path / "etc" / "config.ini")

    assert agent_main.main(["--create-config", "--config", path]) == 0
    assert agent_main.main(["--validate-config", "--config", path]) == 0


def test_main_create_config_requires_path():
    assert agent_main.main(["--create-config"]) == 1


@pytest.mark.parametrize("interval", ["0", "-10", "often"])
def test_invalid_interval_in_config_is_reported(tmp_path, linux_probe, interval):
    path = tmp_path / "config.ini"
    path.write_text(
        "[agent]\n"
        f"interval = {interval}\n"
        "\n"
        "[logging]\n"
        f"log_file = {tmp_path / 'agent.log'}\n"
    )

    with pytest.raises(InvalidConfiguration):
        agent_main.GaugeAgent({"config": str(path), "sink": RecordingSink()})

    assert agent_main.main(["--config", str(path), "--once"]) == 1
