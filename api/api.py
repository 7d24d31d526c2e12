"""Programmatic entrypoint for the certificate inspection tool."""

from __future__ import annotations

from typing import Optional, Union
import logging
import sys

from cert_fetcher import CertificateInfo, fetch_certificate
from config import Settings, get_settings
from errors import CertInfoError
from info_formatter import format_certificate_info
from storage import ReportStorage, build_storage
from uri_normalizer import hostname_from_request


logger = logging.getLogger(__name__)


def report_error(status: int, error: Exception) -> None:
    """Log a failed request; callers only ever see an empty result."""
    logger.error("status: %d", int(status))
    logger.error("%s", error)


def fetch_for_request(request: str, settings: Settings) -> CertificateInfo:
    hostname = hostname_from_request(request)
    return fetch_certificate(
        hostname,
        dial_timeout=settings.dial_timeout,
        handshake_timeout=settings.handshake_timeout,
    )


def inspect_host(host: str, settings: Optional[Settings] = None) -> str:
    """Fetch and format the certificate for ``host``; raises CertInfoError on failure."""
    settings = settings or get_settings()
    info = fetch_for_request(host, settings)
    return format_certificate_info(info, settings.output_format)


def handle(
    request: Union[bytes, str],
    settings: Optional[Settings] = None,
    storage: Optional[ReportStorage] = None,
) -> str:
    """Inspect one host, store the report and return its storage key, or "" on failure."""
    settings = settings or get_settings()
    if isinstance(request, bytes):
        request = request.decode("utf-8", errors="replace")

    try:
        info = fetch_for_request(request, settings)
        report = format_certificate_info(info, settings.output_format)
        storage = storage or build_storage(settings)
        return storage.save(report, info.common_name, extension=settings.output_format.extension)
    except CertInfoError as exc:
        report_error(exc.status, exc)
        return ""


if __name__ == "__main__":
    from log import setup_logging

    cfg = get_settings()
    setup_logging(cfg.log_level)
    print(handle(sys.stdin.read(), cfg))
