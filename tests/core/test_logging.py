from pathlib import Path

from examcore.core.logging import SESSION_LOGGERS, build_logging_config


def test_session_loggers_write_to_the_session_log(tmp_path: Path):
    config = build_logging_config(tmp_path, level="DEBUG")

    assert config["handlers"]["session_file"]["filename"] == str(tmp_path / "sessions.log")
    for name in SESSION_LOGGERS:
        assert "session_file" in config["loggers"][name]["handlers"]
        assert config["loggers"][name]["level"] == "DEBUG"
    assert "session_file" not in config["loggers"]["examcore"]["handlers"]


def test_error_file_only_takes_errors(tmp_path: Path):
    config = build_logging_config(tmp_path)

    assert config["handlers"]["error_file"]["level"] == "ERROR"
    assert config["handlers"]["file"]["filename"] == str(tmp_path / "examcore.log")
    assert config["loggers"]["sqlalchemy.engine"]["level"] == "WARNING"
