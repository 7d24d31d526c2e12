"""Storage backends for formatted certificate reports."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import logging
import re

import requests

from errors import StorageError


logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-z0-9._-]+")


def object_key(name_hint: str, extension: str, now: Optional[datetime] = None) -> str:
    """Derive a filesystem- and URL-safe key, e.g. ``example.test-20240101T000000Z.json``."""
    if now is None:
        now = datetime.now(timezone.utc)
    slug = _UNSAFE_CHARS.sub("-", name_hint.lower()).strip("-.")
    if not slug:
        slug = "unknown"
    stamp = now.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return f"{slug}-{stamp}.{extension}"


class ReportStorage:
    """Persist a report and return the identifier it was stored under."""

    def save(self, report: str, name_hint: str, extension: str = "txt") -> str:
        raise NotImplementedError


class LocalStorage(ReportStorage):
    def __init__(self, directory: str) -> None:
        self.directory = Path(directory)

    def save(self, report: str, name_hint: str, extension: str = "txt") -> str:
        key = object_key(name_hint, extension)
        path = self.directory / key
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(report, encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"error: cannot write report to {path}: {exc}") from exc
        logger.info("report saved to %s", path)
        return key


class HttpStorage(ReportStorage):
    """PUT reports to an object store endpoint (S3-compatible bucket URL or similar)."""

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def save(self, report: str, name_hint: str, extension: str = "txt") -> str:
        key = object_key(name_hint, extension)
        url = f"{self.base_url}/{key}"
        content_type = "application/json" if extension == "json" else "text/plain"
        try:
            r = self.session.put(
                url,
                data=report.encode("utf-8"),
                headers={"Content-Type": f"{content_type}; charset=utf-8"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise StorageError(f"error: cannot upload report to {url}: {exc}") from exc
        if r.status_code >= 400:
            raise StorageError(f"error: upload to {url} failed with status {r.status_code}")
        logger.info("report uploaded to %s", url)
        return key


def build_storage(settings) -> ReportStorage:
    if settings.storage_url:
        return HttpStorage(settings.storage_url, timeout=settings.storage_timeout)
    return LocalStorage(settings.storage_dir)
