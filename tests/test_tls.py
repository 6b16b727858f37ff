"""Tests for mutual TLS material loading."""

import ssl

import pytest

from kastela import Client
from kastela._tls import build_ssl_context, read_material
from kastela.client import _TLSAdapter

from conftest import TEST_SERVER_URL


class TestReadMaterial:
    """Credentials may be paths or raw bytes."""

    def test_bytes_returned_as_is(self):
        assert read_material(b"-----BEGIN-----") == b"-----BEGIN-----"

    def test_path_is_read(self, tmp_path):
        path = tmp_path / "ca.pem"
        path.write_bytes(b"pem-data")

        assert read_material(str(path)) == b"pem-data"
        assert read_material(path) == b"pem-data"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_material(tmp_path / "missing.pem")


class TestBuildSSLContext:
    """Tests for SSL context construction."""

    def test_from_paths(self, tls_files):
        context = build_ssl_context(**tls_files)

        assert isinstance(context, ssl.SSLContext)
        assert context.verify_mode == ssl.CERT_REQUIRED
        assert context.check_hostname is True
        assert len(context.get_ca_certs()) == 1

    def test_from_bytes(self, tls_material):
        context = build_ssl_context(**tls_material)

        assert isinstance(context, ssl.SSLContext)
        assert len(context.get_ca_certs()) == 1

    def test_mismatched_key(self, tls_material):
        from cryptography.hazmat.primitives import serialization
        from cryptography.hazmat.primitives.asymmetric import ec

        other_key = ec.generate_private_key(ec.SECP256R1()).private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )

        with pytest.raises(ssl.SSLError):
            build_ssl_context(tls_material["ca_cert"], tls_material["client_cert"], other_key)


class TestClientTLS:
    """The client mounts its SSL context for https URLs."""

    def test_client_mounts_tls_adapter(self, tls_material):
        client = Client(TEST_SERVER_URL, **tls_material)

        adapter = client.session.get_adapter(TEST_SERVER_URL)
        assert isinstance(adapter, _TLSAdapter)
        assert adapter.poolmanager.connection_pool_kw["ssl_context"] is adapter._ssl_context
        client.close()
