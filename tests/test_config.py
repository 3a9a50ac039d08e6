"""Tests for configuration loading."""
import pytest
from pydantic import ValidationError

from rpcdispatch.config import ServerConfig, load_config
from rpcdispatch.jsonrpc.handler import JSONRPCHandler


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure no RPCDISPATCH_* variables leak in from the environment."""
    for name in [
        "RPCDISPATCH_CONFIG",
        "RPCDISPATCH_DEFAULT_TIMEOUT",
        "RPCDISPATCH_CANCEL_ON_TIMEOUT",
        "RPCDISPATCH_LOG_LEVEL",
        "RPCDISPATCH_HOST",
        "RPCDISPATCH_PORT",
    ]:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = load_config()

    assert config == ServerConfig()
    assert config.default_timeout == 0.0
    assert config.cancel_on_timeout is False


def test_load_yaml(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "server:\n"
        "  default_timeout: 2.5\n"
        "  cancel_on_timeout: true\n"
        "  port: 9000\n"
    )

    config = load_config(str(config_file))

    assert config.default_timeout == 2.5
    assert config.cancel_on_timeout is True
    assert config.port == 9000


def test_load_flat_yaml(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("default_timeout: 1\nlog_level: DEBUG\n")

    config = load_config(str(config_file))

    assert config.default_timeout == 1.0
    assert config.log_level == "DEBUG"


def test_missing_file_uses_defaults(tmp_path):
    config = load_config(str(tmp_path / "nope.yaml"))

    assert config == ServerConfig()


def test_env_overrides_file(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("default_timeout: 1\n")
    monkeypatch.setenv("RPCDISPATCH_CONFIG", str(config_file))
    monkeypatch.setenv("RPCDISPATCH_DEFAULT_TIMEOUT", "0.25")
    monkeypatch.setenv("RPCDISPATCH_CANCEL_ON_TIMEOUT", "true")

    config = load_config()

    assert config.default_timeout == 0.25
    assert config.cancel_on_timeout is True


def test_negative_timeout_rejected(monkeypatch):
    monkeypatch.setenv("RPCDISPATCH_DEFAULT_TIMEOUT", "-1")

    with pytest.raises(ValidationError):
        load_config()


def test_non_mapping_yaml_rejected(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("- just\n- a list\n")

    with pytest.raises(ValueError):
        load_config(str(config_file))


def test_handler_from_config():
    rpc = JSONRPCHandler.from_config(ServerConfig(default_timeout=3, cancel_on_timeout=True))

    assert rpc.default_timeout == 3.0
    assert rpc.cancel_on_timeout is True
