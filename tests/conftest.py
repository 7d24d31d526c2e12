# tests/conftest.py
import socket
import ssl
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

# Ensure the repo root is in sys.path for imports
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


NOT_BEFORE = datetime(2024, 1, 1, tzinfo=timezone.utc)
NOT_AFTER = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def private_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def make_certificate(private_key):
    def _make(common_name="example.test", issuer_cn="Test CA", sans=("example.test", "www.example.test")):
        builder = (
            x509.CertificateBuilder()
            .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)]))
            .issuer_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, issuer_cn)]))
            .public_key(private_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(NOT_BEFORE)
            .not_valid_after(NOT_AFTER)
        )
        if sans:
            builder = builder.add_extension(
                x509.SubjectAlternativeName([x509.DNSName(name) for name in sans]),
                critical=False,
            )
        return builder.sign(private_key, hashes.SHA256())

    return _make


@pytest.fixture(scope="session")
def certificate(make_certificate):
    return make_certificate()


@pytest.fixture
def closed_port():
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]
    return port


class _LocalServer:
    def __init__(self, handler):
        self.handler = handler
        self.stop = threading.Event()
        self.listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.listener.bind(("127.0.0.1", 0))
        self.listener.listen(5)
        self.listener.settimeout(0.2)
        self.port = self.listener.getsockname()[1]
        self.thread = threading.Thread(target=self._serve, daemon=True)

    def _serve(self):
        while not self.stop.is_set():
            try:
                conn, _ = self.listener.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            conn.settimeout(5)
            try:
                self.handler(conn)
            except OSError:
                pass
            finally:
                conn.close()

    def __enter__(self):
        self.thread.start()
        return self

    def __exit__(self, *exc):
        self.stop.set()
        self.thread.join(timeout=2)
        self.listener.close()


@pytest.fixture
def tls_server(tmp_path, certificate, private_key):
    """Serve ``certificate`` over TLS on 127.0.0.1; yields the port."""
    cert_file = tmp_path / "server.pem"
    key_file = tmp_path / "server.key"
    cert_file.write_bytes(certificate.public_bytes(serialization.Encoding.PEM))
    key_file.write_bytes(
        private_key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
    )
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(str(cert_file), str(key_file))

    def handler(conn):
        with context.wrap_socket(conn, server_side=True) as tls_conn:
            # hold the session open until the client hangs up
            tls_conn.recv(1)

    with _LocalServer(handler) as server:
        yield server.port


@pytest.fixture
def reset_server():
    """Accept TCP connections, read the ClientHello and hang up mid-handshake."""

    def handler(conn):
        conn.recv(4096)

    with _LocalServer(handler) as server:
        yield server.port


@pytest.fixture
def silent_server():
    """Accept TCP connections, read the ClientHello and never answer."""

    def handler(conn):
        conn.recv(4096)
        # blocks until the client gives up and hangs up
        conn.recv(1)

    with _LocalServer(handler) as server:
        yield server.port
