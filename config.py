"""Configuration for the certificate inspection tool."""

from dataclasses import dataclass
from typing import Optional
import os

from info_formatter import OutputFormat, parse_output_format


@dataclass(frozen=True)
class Settings:
    dial_timeout: float = 5.0
    handshake_timeout: float = 5.0
    output_format: OutputFormat = OutputFormat.TEXT
    storage_dir: str = "reports"
    storage_url: Optional[str] = None
    storage_timeout: float = 10.0
    log_level: str = "INFO"


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    if parsed <= 0:
        return default
    return parsed


def _env_output_format() -> OutputFormat:
    # Http_Query is the query string a function gateway forwards, e.g. "output=json"
    value = os.getenv("CERTINFO_OUTPUT")
    if value is None:
        value = os.getenv("Http_Query")
    return parse_output_format(value)


def get_settings() -> Settings:
    """Load settings from environment variables with safe defaults."""
    return Settings(
        dial_timeout=_env_float("CERTINFO_DIAL_TIMEOUT", Settings.dial_timeout),
        handshake_timeout=_env_float("CERTINFO_HANDSHAKE_TIMEOUT", Settings.handshake_timeout),
        output_format=_env_output_format(),
        storage_dir=os.getenv("CERTINFO_STORAGE_DIR", Settings.storage_dir),
        storage_url=os.getenv("CERTINFO_STORAGE_URL") or None,
        storage_timeout=_env_float("CERTINFO_STORAGE_TIMEOUT", Settings.storage_timeout),
        log_level=os.getenv("CERTINFO_LOG_LEVEL", Settings.log_level).upper(),
    )
