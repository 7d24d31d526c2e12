"""Turn caller-supplied host strings into a hostname we can dial."""

from __future__ import annotations

from urllib.parse import urlparse

from errors import URIParseError


DEFAULT_SCHEME = "https://"


def normalize_uri(raw: str) -> str:
    """Lower-case the input and make sure it carries an http(s) scheme.

    Only a full ``http://`` or ``https://`` prefix counts as a scheme, so bare
    hosts that merely start with "http" (``httpbin.org``) still get ``https://``.
    """
    uri = raw.lower()
    if not uri.startswith("http://") and not uri.startswith("https://"):
        uri = DEFAULT_SCHEME + uri
    return uri


def extract_hostname(uri: str) -> str:
    try:
        parsed = urlparse(uri)
        host = parsed.hostname or ""
    except ValueError as exc:
        raise URIParseError(f"error: cannot parse {uri!r}: {exc}") from exc
    if not host:
        raise URIParseError(f"error: no hostname in {uri!r}")
    return host


def hostname_from_request(raw: str) -> str:
    """Strip a single trailing newline, then normalize and extract the hostname."""
    if raw.endswith("\n"):
        raw = raw[:-1]
    return extract_hostname(normalize_uri(raw))
