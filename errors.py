"""Error types raised by the certificate inspection pipeline."""

from __future__ import annotations

from http import HTTPStatus


class CertInfoError(Exception):
    """Base class for every failure the pipeline can report."""

    kind = "Internal"
    status = HTTPStatus.INTERNAL_SERVER_ERROR


class URIParseError(CertInfoError):
    """The requested host string could not be parsed into a URI."""

    kind = "URIParseFailed"


class DialError(CertInfoError):
    """TCP connection to the TLS port failed or timed out."""

    kind = "DialFailed"


class HandshakeError(CertInfoError):
    """TLS handshake with the peer did not complete."""

    kind = "HandshakeFailed"


class AddressParseError(CertInfoError):
    """The peer socket address could not be split into host and port."""

    kind = "AddressParseFailed"


class CertificateDecodeError(CertInfoError):
    """The peer presented no certificate, or one we could not decode."""

    kind = "CertificateDecodeFailed"


class EncodingError(CertInfoError):
    """The report could not be serialized to JSON."""

    kind = "EncodingFailed"


class StorageError(CertInfoError):
    """Writing the formatted report to storage failed."""

    kind = "StorageFailed"
