from pathlib import Path

from core.logging import LoggingSettings, build_logging_config


def test_console_only_outside_containers():
    config = build_logging_config(LoggingSettings())

    assert set(config["handlers"]) == {"console"}
    assert config["root"]["handlers"] == ["console"]
    assert config["loggers"]["core.queue"]["handlers"] == []


def test_container_logs_add_queue_file(tmp_path: Path):
    config = build_logging_config(LoggingSettings(log_dir=tmp_path, queue_level="DEBUG", milliseconds=True))

    assert config["handlers"]["queue_file"]["filename"] == str(tmp_path / "request-queue.log")
    assert config["handlers"]["queue_file"]["level"] == "DEBUG"
    assert config["root"]["handlers"] == ["console", "file"]
    assert config["loggers"]["core.queue"] == {"level": "DEBUG", "handlers": ["queue_file"]}
    assert config["formatters"]["standard"]["format"].startswith("%(asctime)s.%(msecs)03d")


def test_settings_from_env(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("NODE_ENV", "production")
    monkeypatch.setenv("BACKEND_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("BACKEND_LOG_LEVEL", "debug")
    monkeypatch.setenv("REQUEST_QUEUE_LOG_LEVEL", "nonsense")

    settings = LoggingSettings.from_env()

    assert settings.log_dir == tmp_path
    assert settings.level == "DEBUG"
    assert settings.queue_level == "DEBUG"


def test_test_environment_never_writes_files(monkeypatch):
    monkeypatch.setenv("NODE_ENV", "test")

    assert LoggingSettings.from_env().log_dir is None
