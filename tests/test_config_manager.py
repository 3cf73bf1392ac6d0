from pathlib import Path

import pytest

from managers.config_manager import ConfigError, ConfigManager


@pytest.fixture
def env():
    return {"AWS_LAMBDA_RUNTIME_API": "127.0.0.1:9001"}


def test_defaults_from_bundled_yaml(env):
    config = ConfigManager(environ=env).load()

    assert config.runtime_api == "127.0.0.1:9001"
    assert config.extension_name == "secretmanager"
    assert config.extensions_api_url == "http://127.0.0.1:9001/2020-01-01/extension"
    assert config.lookup_host == "127.0.0.1"
    assert config.lookup_port == 3000
    assert config.shutdown_deadline_ms == 1000
    assert config.shutdown_deadline == pytest.approx(1.0)
    assert config.queue_send_timeout == pytest.approx(2.5)
    assert config.secret_name is None


def test_environment_overrides(env):
    env.update({
        "SECRETMANAGER_PORT": "3100",
        "SECRETMANAGER_SHUTDOWN_DEADLINE_MS": "250",
        "SECRET_NAME": "db/password",
        "SQS_QUEUE_URL": "https://sqs.eu-west-1.amazonaws.com/1/results.fifo",
        "AWS_REGION": "eu-west-1",
        "LOG_LEVEL": "DEBUG",
    })

    config = ConfigManager(environ=env).load()

    assert config.lookup_port == 3100
    assert config.shutdown_deadline == pytest.approx(0.25)
    assert config.secret_name == "db/password"
    assert config.queue_url.endswith("results.fifo")
    assert config.aws_region == "eu-west-1"
    assert config.log_level == "DEBUG"


def test_missing_runtime_api_is_an_error():
    with pytest.raises(ConfigError):
        ConfigManager(environ={}).load()


def test_malformed_port_is_an_error(env):
    env["SECRETMANAGER_PORT"] = "three-thousand"

    with pytest.raises(ConfigError):
        ConfigManager(environ=env).load()


def test_port_out_of_range_is_an_error(env):
    env["SECRETMANAGER_PORT"] = "70000"

    with pytest.raises(ConfigError):
        ConfigManager(environ=env).load()


def test_non_positive_deadline_is_an_error(env):
    env["SECRETMANAGER_SHUTDOWN_DEADLINE_MS"] = "0"

    with pytest.raises(ConfigError):
        ConfigManager(environ=env).load()


def test_unreadable_yaml_falls_back_to_factory_defaults(env, tmp_path):
    config = ConfigManager(config_path=tmp_path / "missing.yaml", environ=env).load()

    assert config.lookup_port == 3000
    assert config.shutdown_deadline_ms == 1000


def test_yaml_values_are_used(env, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "extension:\n  name: custom\n"
        "lookup_server:\n  port: 3300\n"
        "shutdown:\n  deadline_ms: 500\n",
        encoding="utf-8",
    )

    config = ConfigManager(config_path=path, environ=env).load()

    assert config.extension_name == "custom"
    assert config.lookup_port == 3300
    assert config.shutdown_deadline_ms == 500


def test_default_path_is_bundled_with_config_package():
    import config

    manager = ConfigManager(environ={})

    assert manager.config_path == Path(config.__file__).parent / "config.yaml"
    assert manager.config_path.is_file()
