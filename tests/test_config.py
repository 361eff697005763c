from __future__ import annotations

from gauge_agent.core.config import DEFAULT_INTERVAL, AgentConfig, create_default_config


def write_config(tmp_path, body):
    path = tmp_path / "config.ini"
    path.write_text(body)
    return str(path)


def test_defaults_without_file(tmp_path):
    config = AgentConfig(str(tmp_path / "absent.ini"))

    agent = config.get_agent_config()
    assert agent["interval"] == DEFAULT_INTERVAL == 60
    assert agent["hostname"] == ""
    assert agent["command_timeout"] == 30.0

    collector = config.get_collector_config()
    assert collector["url"].startswith("http://")
    assert collector["verify_ssl"] is False
    assert config.validate() is True


def test_file_values_override_defaults(tmp_path):
    path = write_config(tmp_path, (
        "[collector]\n"
        "url = https://metrics.example.com/gauges\n"
        "auth_token = secret-token\n"
        "timeout = 2.5\n"
        "\n"
        "[agent]\n"
        "hostname = web01\n"
        "interval = 15\n"
    ))
    config = AgentConfig(path)

    assert config.get_agent_config()["hostname"] == "web01"
    assert config.get_agent_config()["interval"] == 15
    assert config.get_collector_config()["timeout"] == 2.5
    assert config.get_collector_config()["auth_token"] == "secret-token"
    # Untouched options keep their default
    assert config.get_agent_config()["log_level"] == "INFO"


def test_validate_rejects_bad_values(tmp_path):
    path = write_config(tmp_path, (
        "[collector]\n"
        "url = ftp://nowhere\n"
        "\n"
        "[agent]\n"
        "interval = -5\n"
        "log_level = LOUD\n"
    ))
    assert AgentConfig(path).validate() is False


def test_validate_rejects_non_numeric_interval(tmp_path):
    path = write_config(tmp_path, "[agent]\ninterval = often\n")
    assert AgentConfig(path).validate() is False


def test_malformed_file_falls_back_to_defaults(tmp_path):
    path = write_config(tmp_path, "this is not an ini file\n")
    config = AgentConfig(path)
    assert config.get_agent_config()["interval"] == DEFAULT_INTERVAL


def test_create_default_config_writes_file(tmp_path):
    path = tmp_path / "nested" / "config.ini"
    create_default_config(str(path))

    assert path.exists()
    reloaded = AgentConfig(str(path))
    assert reloaded.get_agent_config()["interval"] == DEFAULT_INTERVAL
