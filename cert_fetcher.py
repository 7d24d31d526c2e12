"""Fetch the leaf certificate a TLS endpoint presents."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple
import logging
import socket
import ssl
import time

from cryptography import x509
from cryptography.x509.oid import NameOID

from errors import AddressParseError, CertificateDecodeError, DialError, HandshakeError


logger = logging.getLogger(__name__)

HTTPS_PORT = 443
DIAL_TIMEOUT = 5.0
HANDSHAKE_TIMEOUT = 5.0

# Certificates are read, never trusted: the handshake must complete for
# expired, self-signed and mismatched endpoints alike.
VERIFY_PEER_CERTIFICATE = False


def _common_name(name: x509.Name) -> str:
    attrs = name.get_attributes_for_oid(NameOID.COMMON_NAME)
    if not attrs:
        return ""
    return str(attrs[0].value)


@dataclass(frozen=True)
class CertificateInfo:
    """Leaf certificate plus the remote address it was actually served from."""

    certificate: x509.Certificate
    host: str
    port: str

    @property
    def common_name(self) -> str:
        return _common_name(self.certificate.subject)

    @property
    def issuer_common_name(self) -> str:
        return _common_name(self.certificate.issuer)

    @property
    def not_before(self) -> datetime:
        return self.certificate.not_valid_before_utc

    @property
    def not_after(self) -> datetime:
        return self.certificate.not_valid_after_utc

    @property
    def dns_names(self) -> List[str]:
        try:
            san = self.certificate.extensions.get_extension_for_class(x509.SubjectAlternativeName)
        except x509.ExtensionNotFound:
            return []
        return list(san.value.get_values_for_type(x509.DNSName))


def _client_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    if not VERIFY_PEER_CERTIFICATE:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def _split_peer_address(peer) -> Tuple[str, str]:
    # AF_INET gives (host, port), AF_INET6 gives (host, port, flowinfo, scope_id)
    if isinstance(peer, tuple) and len(peer) >= 2:
        host, port = peer[0], peer[1]
        if isinstance(host, str) and host and isinstance(port, int):
            return host, str(port)
    raise AddressParseError(f"error: cannot split peer address {peer!r} into host and port")


def _decode_leaf(der: Optional[bytes]) -> x509.Certificate:
    if not der:
        raise CertificateDecodeError("error: peer presented no certificate")
    try:
        return x509.load_der_x509_certificate(der)
    except ValueError as exc:
        raise CertificateDecodeError(f"error: cannot decode peer certificate: {exc}") from exc


def fetch_certificate(
    hostname: str,
    port: int = HTTPS_PORT,
    dial_timeout: float = DIAL_TIMEOUT,
    handshake_timeout: float = HANDSHAKE_TIMEOUT,
) -> CertificateInfo:
    """Connect to ``hostname:port``, complete a TLS handshake and return the leaf certificate.

    The connect step is bounded by ``dial_timeout``. The handshake gets whatever
    remains of ``dial_timeout + handshake_timeout`` counted from the start of the
    dial, so connection establishment as a whole has a single deadline.
    """
    address = f"{hostname}:{port}"
    deadline = time.monotonic() + dial_timeout + handshake_timeout

    logger.debug("dialing %s (timeout %.1fs)", address, dial_timeout)
    try:
        sock = socket.create_connection((hostname, port), timeout=dial_timeout)
    except (OSError, UnicodeError) as exc:
        raise DialError(f"SSL/TLS not enabled on {hostname}\nDial error: {exc}") from exc

    with sock:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise HandshakeError(
                f"Invalid SSL/TLS for {address}\nHandshake error: connection deadline exceeded"
            )
        sock.settimeout(remaining)
        try:
            tls_sock = _client_context().wrap_socket(sock, server_hostname=hostname)
        except (OSError, ValueError) as exc:
            raise HandshakeError(f"Invalid SSL/TLS for {address}\nHandshake error: {exc}") from exc

        with tls_sock:
            try:
                peer = tls_sock.getpeername()
            except OSError as exc:
                raise AddressParseError(f"error: cannot read peer address: {exc}") from exc
            host, peer_port = _split_peer_address(peer)
            der = tls_sock.getpeercert(binary_form=True)
            logger.debug("handshake with %s done, peer %s:%s (%s)", address, host, peer_port, tls_sock.version())

    return CertificateInfo(certificate=_decode_leaf(der), host=host, port=peer_port)
