from config import Settings, get_settings
from info_formatter import OutputFormat

ENV_VARS = (
    "CERTINFO_DIAL_TIMEOUT",
    "CERTINFO_HANDSHAKE_TIMEOUT",
    "CERTINFO_OUTPUT",
    "Http_Query",
    "CERTINFO_STORAGE_DIR",
    "CERTINFO_STORAGE_URL",
    "CERTINFO_STORAGE_TIMEOUT",
    "CERTINFO_LOG_LEVEL",
)


def _clear(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    _clear(monkeypatch)
    settings = get_settings()
    assert settings == Settings()
    assert settings.dial_timeout == 5.0
    assert settings.output_format is OutputFormat.TEXT


def test_gateway_query_selects_json(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("Http_Query", "output=json")
    assert get_settings().output_format is OutputFormat.JSON


def test_explicit_output_wins_over_gateway_query(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("Http_Query", "output=json")
    monkeypatch.setenv("CERTINFO_OUTPUT", "text")
    assert get_settings().output_format is OutputFormat.TEXT


def test_invalid_numbers_fall_back(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("CERTINFO_DIAL_TIMEOUT", "soon")
    monkeypatch.setenv("CERTINFO_HANDSHAKE_TIMEOUT", "-1")
    monkeypatch.setenv("CERTINFO_STORAGE_TIMEOUT", "2.5")
    settings = get_settings()
    assert settings.dial_timeout == 5.0
    assert settings.handshake_timeout == 5.0
    assert settings.storage_timeout == 2.5


def test_storage_and_logging(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("CERTINFO_STORAGE_URL", "https://bucket.example")
    monkeypatch.setenv("CERTINFO_LOG_LEVEL", "debug")
    settings = get_settings()
    assert settings.storage_url == "https://bucket.example"
    assert settings.log_level == "DEBUG"
