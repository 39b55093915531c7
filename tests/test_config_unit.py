import logging

import pytest

from mockinterview.config import LANGUAGE_CODE, get_config
from mockinterview.utils import setup_logging

_ENV = (
    "MOCKINTERVIEW_API_URL", "MOCKINTERVIEW_API_TOKEN", "MOCKINTERVIEW_LANGUAGE",
    "MOCKINTERVIEW_ENABLE_SPEECH", "MOCKINTERVIEW_LOG_FILE", "MOCKINTERVIEW_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    config = get_config()
    assert config.api_base_url == "http://localhost:5000/api"
    assert config.api_token is None
    assert config.language_code == LANGUAGE_CODE
    assert config.enable_speech is True


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("MOCKINTERVIEW_API_URL", "https://interviews.example.com/api/")
    monkeypatch.setenv("MOCKINTERVIEW_API_TOKEN", "tok")
    monkeypatch.setenv("MOCKINTERVIEW_LANGUAGE", "en-US")
    monkeypatch.setenv("MOCKINTERVIEW_ENABLE_SPEECH", "no")
    monkeypatch.setenv("MOCKINTERVIEW_LOG_LEVEL", "debug")

    config = get_config()

    assert config.api_base_url == "https://interviews.example.com/api"
    assert config.api_token == "tok"
    assert config.language_code == "en-US"
    assert config.enable_speech is False
    assert config.log_level == "DEBUG"


def test_blank_api_url_is_a_configuration_error(monkeypatch) -> None:
    monkeypatch.setenv("MOCKINTERVIEW_API_URL", "  ")
    with pytest.raises(ValueError):
        get_config()


def test_setup_logging_writes_to_file(tmp_path) -> None:
    log_path = str(tmp_path / "logs" / "session.log")
    assert setup_logging(log_path, "INFO") == log_path
    logging.getLogger("capture").info("capture started")
    for handler in logging.getLogger().handlers:
        handler.flush()
    with open(log_path) as fh:
        assert "capture started" in fh.read()
    for handler in logging.getLogger().handlers:
        handler.close()
    logging.getLogger().handlers.clear()
