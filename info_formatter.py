"""Render fetched certificate details as plain text or JSON."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional
import json

import humanize

from cert_fetcher import CertificateInfo
from errors import EncodingError


# Field order is shared by both output formats.
FIELDS = (
    "Host",
    "Port",
    "Issuer",
    "CommonName",
    "NotBefore",
    "NotAfter",
    "NotAfterUnix",
    "SANs",
    "TimeRemaining",
)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"

    @property
    def extension(self) -> str:
        return "json" if self is OutputFormat.JSON else "txt"


def parse_output_format(value: Optional[str]) -> OutputFormat:
    """Map a selector to a format: ``json`` or ``output=json`` pick JSON, anything else text."""
    if value is None:
        return OutputFormat.TEXT
    value = value.strip().lower()
    if value in ("json", "output=json"):
        return OutputFormat.JSON
    return OutputFormat.TEXT


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _timestamp(value: datetime) -> str:
    return _utc(value).strftime(TIMESTAMP_FORMAT)


def time_remaining(not_after: datetime, now: datetime) -> str:
    """Relative phrase such as "10 days from now" or "3 days ago"."""
    # humanize compares naive datetimes; both sides are pinned to UTC first
    expires = _utc(not_after).replace(tzinfo=None)
    current = _utc(now).replace(tzinfo=None)
    return humanize.naturaltime(expires, when=current)


def report_fields(info: CertificateInfo, now: Optional[datetime] = None) -> Dict:
    if now is None:
        now = datetime.now(timezone.utc)
    not_after = _utc(info.not_after)
    return {
        "Host": info.host,
        "Port": info.port,
        "Issuer": info.issuer_common_name,
        "CommonName": info.common_name,
        "NotBefore": _timestamp(info.not_before),
        "NotAfter": _timestamp(not_after),
        "NotAfterUnix": int(not_after.timestamp()),
        "SANs": info.dns_names,
        "TimeRemaining": time_remaining(not_after, now),
    }


def _text_value(value) -> str:
    if isinstance(value, list):
        return "[" + " ".join(str(item) for item in value) + "]"
    return str(value)


def format_certificate_info(
    info: CertificateInfo,
    output_format: OutputFormat = OutputFormat.TEXT,
    now: Optional[datetime] = None,
) -> str:
    fields = report_fields(info, now)
    if output_format is OutputFormat.JSON:
        try:
            return json.dumps(fields, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise EncodingError(f"error: cannot encode report as JSON: {exc}") from exc
    return "\n".join(f"{name} {_text_value(fields[name])}" for name in FIELDS)
