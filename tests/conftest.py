"""Pytest fixtures for Kastela SDK tests."""

import datetime
import json
import ssl
from unittest.mock import patch

import httpx
import pytest
import requests

TEST_SERVER_URL = "https://kastela.test:3201"
SERVER_VERSION = "v0.2.0"

_NO_BODY = object()


def make_response(status_code=200, json_body=_NO_BODY, text=None, version=SERVER_VERSION):
    """Build a real requests.Response as the session would return it."""
    response = requests.Response()
    response.status_code = status_code
    response.encoding = "utf-8"
    if json_body is not _NO_BODY:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    elif text is not None:
        response._content = text.encode("utf-8")
        response.headers["Content-Type"] = "text/plain"
    else:
        response._content = b""
    if version is not None:
        response.headers["X-Kastela-Version"] = version
    return response


def make_async_response(status_code=200, json_body=_NO_BODY, text=None, version=SERVER_VERSION):
    """Build a real httpx.Response as the async client would return it."""
    headers = {"X-Kastela-Version": version} if version is not None else {}
    if json_body is not _NO_BODY:
        return httpx.Response(status_code, json=json_body, headers=headers)
    if text is not None:
        return httpx.Response(status_code, text=text, headers=headers)
    return httpx.Response(status_code, headers=headers)


def sent_json(mock_request):
    """JSON body passed to the last mocked request."""
    return mock_request.call_args.kwargs.get("json")


def sent_url(mock_request):
    return mock_request.call_args.args[1]


@pytest.fixture
def server_url():
    """Get the test server URL."""
    return TEST_SERVER_URL


@pytest.fixture
def stub_tls():
    """Skip loading certificates for clients built in a test."""
    context = ssl.create_default_context()
    with patch("kastela.client.build_ssl_context", return_value=context):
        with patch("kastela.async_client.build_ssl_context", return_value=context):
            yield context


@pytest.fixture
def client(stub_tls):
    """Client for the batched (v0.2) revision."""
    from kastela import Client

    with Client(TEST_SERVER_URL, "ca.crt", "client.crt", "client.key") as c:
        yield c


@pytest.fixture
def per_resource_client(stub_tls):
    """Client for the per-resource (v0.1) revision."""
    from kastela import Client

    with Client(TEST_SERVER_URL, "ca.crt", "client.crt", "client.key", revision="v0.1") as c:
        yield c


@pytest.fixture
def tls_material():
    """Throwaway CA, client certificate and client key as PEM bytes."""
    from cryptography import x509
    from cryptography.hazmat.primitives import hashes, serialization
    from cryptography.hazmat.primitives.asymmetric import ec
    from cryptography.x509.oid import NameOID

    now = datetime.datetime.now(datetime.timezone.utc)
    validity = datetime.timedelta(days=1)

    ca_key = ec.generate_private_key(ec.SECP256R1())
    ca_name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "kastela-test-ca")])
    ca_cert = (
        x509.CertificateBuilder()
        .subject_name(ca_name)
        .issuer_name(ca_name)
        .public_key(ca_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - validity)
        .not_valid_after(now + validity)
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(ca_key, hashes.SHA256())
    )

    client_key = ec.generate_private_key(ec.SECP256R1())
    client_cert = (
        x509.CertificateBuilder()
        .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "kastela-test-client")]))
        .issuer_name(ca_name)
        .public_key(client_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - validity)
        .not_valid_after(now + validity)
        .sign(ca_key, hashes.SHA256())
    )

    return {
        "ca_cert": ca_cert.public_bytes(serialization.Encoding.PEM),
        "client_cert": client_cert.public_bytes(serialization.Encoding.PEM),
        "client_key": client_key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        ),
    }


@pytest.fixture
def tls_files(tmp_path, tls_material):
    """The same TLS material written to disk, as file paths."""
    paths = {}
    for name, pem in tls_material.items():
        path = tmp_path / f"{name}.pem"
        path.write_bytes(pem)
        paths[name] = str(path)
    return paths
