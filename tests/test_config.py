import os
from unittest import mock

from tele_watchdog import config


def test_settings_defaults():
    # Mock environment to be empty
    with mock.patch.dict(os.environ, {}, clear=True):
        settings = config._read_settings()
        assert settings.BOT_TOKEN is None
        assert settings.ALLOWED_CHAT_IDS == set()
        assert settings.RATE_LIMIT_S == 1.0
        assert settings.DATA_PATH == "data/watchdog_state.json"
        assert settings.CONFIG_PATH == "watchdog_config.json"
        assert settings.PING_BIN
        assert settings.LOG_FILE is None


def test_settings_custom():
    env = {
        "BOT_TOKEN": "123:ABC",
        "ALLOWED_CHAT_IDS": "123, -456, nope",
        "RATE_LIMIT_S": "2.5",
        "DATA_PATH": "/srv/state.json",
        "CONFIG_PATH": "/srv/config.json",
        "PING_BIN": "/usr/bin/ping",
        "LOG_FILE": "/var/log/watchdog.log",
    }
    with mock.patch.dict(os.environ, env, clear=True):
        settings = config._read_settings()
        assert settings.BOT_TOKEN == "123:ABC"
        assert settings.ALLOWED_CHAT_IDS == {123, -456}
        assert settings.RATE_LIMIT_S == 2.5
        assert settings.DATA_PATH == "/srv/state.json"
        assert settings.CONFIG_PATH == "/srv/config.json"
        assert settings.PING_BIN == "/usr/bin/ping"
        assert settings.LOG_FILE == "/var/log/watchdog.log"


def test_invalid_rate_limit_falls_back():
    with mock.patch.dict(os.environ, {"RATE_LIMIT_S": "fast"}, clear=True):
        assert config._read_settings().RATE_LIMIT_S == 1.0
